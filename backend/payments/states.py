"""
Payment state of an order as a tagged variant.

The order row stores payment_state plus amount_paid/amount_due; these classes
are the read model handed to callers so they never have to guess whether the
ledger has been initialised.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple, Union


@dataclass(frozen=True)
class PaymentRecord:
    method: str
    amount: Decimal
    paid_at: object


@dataclass(frozen=True)
class NotStarted:
    tag = "NOT_STARTED"


@dataclass(frozen=True)
class Partial:
    paid: Decimal
    due: Decimal
    history: Tuple[PaymentRecord, ...] = ()

    tag = "PARTIAL"


@dataclass(frozen=True)
class Settled:
    paid: Decimal
    history: Tuple[PaymentRecord, ...] = ()

    tag = "SETTLED"


PaymentState = Union[NotStarted, Partial, Settled]


def payment_state_for(order) -> PaymentState:
    from orders.models import Order

    if order.payment_state == Order.PaymentState.NOT_STARTED:
        return NotStarted()

    history = tuple(
        PaymentRecord(method=p.method, amount=p.amount, paid_at=p.paid_at)
        for p in order.partial_payments.all()
    )
    if order.payment_state == Order.PaymentState.SETTLED:
        return Settled(paid=order.amount_paid, history=history)
    return Partial(paid=order.amount_paid, due=order.amount_due, history=history)


def describe(state: PaymentState) -> dict:
    """Serializable form used by the API."""
    data = {"state": state.tag}
    if isinstance(state, (Partial, Settled)):
        data["paid"] = str(state.paid)
        data["history"] = [
            {"method": r.method, "amount": str(r.amount), "paid_at": r.paid_at.isoformat()}
            for r in state.history
        ]
    if isinstance(state, Partial):
        data["due"] = str(state.due)
    return data
