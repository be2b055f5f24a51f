"""
Orders services package.

- OrderService: order lifecycle (create, edit items, kitchen status, close, cancel, table, guest)
- OrderCalculationService: item validation, bill previews and splits
- PendingPaymentService: pay later and consolidation of repeat receivables
- AuditService: append-only order audit trail
"""

from .order_service import OrderService
from .calculation_service import OrderCalculationService
from .pending_service import PendingPaymentService
from .audit_service import AuditService

__all__ = [
    'OrderService',
    'OrderCalculationService',
    'PendingPaymentService',
    'AuditService',
]
