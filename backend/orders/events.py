"""
Domain events raised by the billing services.

Services collect events while they work and return them in a ServiceResult.
Nothing is dispatched until the surrounding transaction commits, so a rolled
back operation never produces a notification.
"""

from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Any, List, Optional


@dataclass(frozen=True)
class DomainEvent:
    order_number: Optional[int]

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        data = {"type": self.name}
        for key, value in asdict(self).items():
            data[key] = str(value) if isinstance(value, Decimal) else value
        return data


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    table_number: Optional[str] = None


@dataclass(frozen=True)
class OrderUpdated(DomainEvent):
    item_count: int = 0


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    previous_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderClosed(DomainEvent):
    total: Decimal = Decimal("0")
    payment_method: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    reason: str = ""


@dataclass(frozen=True)
class TableChanged(DomainEvent):
    from_table: Optional[str] = None
    to_table: Optional[str] = None


@dataclass(frozen=True)
class PaymentPending(DomainEvent):
    amount_due: Decimal = Decimal("0")


@dataclass(frozen=True)
class OrderConsolidated(DomainEvent):
    target_order_number: int = 0
    amount_due: Decimal = Decimal("0")


@dataclass(frozen=True)
class PartialPaymentRecorded(DomainEvent):
    amount: Decimal = Decimal("0")
    amount_due: Decimal = Decimal("0")


@dataclass(frozen=True)
class PaymentSettled(DomainEvent):
    amount_paid: Decimal = Decimal("0")


@dataclass(frozen=True)
class LowStockCrossed(DomainEvent):
    item_name: str = ""
    quantity: Decimal = Decimal("0")
    threshold: Decimal = Decimal("0")


@dataclass(frozen=True)
class OutOfStock(DomainEvent):
    item_name: str = ""


@dataclass(frozen=True)
class LoyaltyUpdated(DomainEvent):
    customer: str = ""
    points: int = 0
    tier: str = ""


@dataclass
class ServiceResult:
    """An order after a service operation, plus the events it raised."""

    order: Any
    events: List[DomainEvent] = field(default_factory=list)

    def event_names(self) -> List[str]:
        return [event.name for event in self.events]
