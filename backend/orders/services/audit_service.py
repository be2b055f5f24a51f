from decimal import Decimal
from uuid import UUID

from orders.models import OrderAuditEntry


def _jsonable(value):
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class AuditService:

    @staticmethod
    def record(order, action, details="", performed_by="", **metadata) -> OrderAuditEntry:
        """Append an audit entry. Call inside the operation's transaction."""
        metadata.setdefault("version", order.version)
        return OrderAuditEntry.objects.create(
            order=order,
            action=action,
            details=details[:500],
            performed_by=performed_by or "",
            metadata=_jsonable(metadata),
        )
