from decimal import Decimal
from django.db import transaction
import logging

from settings.config import BillingConfig
from orders.events import PartialPaymentRecorded, PaymentSettled, ServiceResult
from orders.exceptions import InvalidAmount, InvalidOrder
from orders.models import Order, OrderAuditEntry
from orders.repositories import OrderRepository, retry_on_conflict
from orders.services.audit_service import AuditService
from orders.services.order_service import OrderService
from orders.signals import dispatch_on_commit
from .models import PartialPayment
from .money import format_money, quantize, to_decimal

logger = logging.getLogger(__name__)


class PaymentLedgerService:
    """Partial settlements against pay-later orders."""

    @staticmethod
    def payment_summary(order, currency) -> str:
        """e.g. "cash: ₹400, upi: ₹600" """
        return ", ".join(
            f"{payment.method}: {format_money(payment.amount, currency)}"
            for payment in order.partial_payments.all()
        )

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def settle(order_id, method, amount=None, restaurant=None, expected_version=None, performed_by="") -> ServiceResult:
        """
        Records a payment against a pending order.

        amount defaults to everything still due. Once nothing is due the order
        closes through the same path as a direct close, so inventory and
        loyalty are applied exactly once.

        Raises:
            AlreadyClosed: the order is closed or cancelled
            InvalidOrder: the order is not pay later, or no method was given
            InvalidAmount: amount is not positive or exceeds the amount due
        """
        method = (method or "").strip()
        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)
        if order.status != Order.OrderStatus.PENDING_PAYMENT:
            raise InvalidOrder(f"Order #{order.order_number} is not pay later, close it instead")
        if not method:
            raise InvalidOrder("A payment method is required")

        config = BillingConfig.for_restaurant(order.restaurant)

        if amount is None:
            amount = order.amount_due
        else:
            amount = quantize(config.currency, to_decimal(amount))

        # A zero-total receivable closes without a payment row
        if not (amount == 0 and order.amount_due == 0):
            if amount <= 0 or amount > order.amount_due:
                logger.warning(
                    f"Order #{order.order_number}: rejected payment of {amount}, due {order.amount_due}"
                )
                raise InvalidAmount(amount, order.amount_due)
            PartialPayment.objects.create(order=order, method=method, amount=amount)

        order.amount_paid += amount
        order.amount_due = order.total - order.amount_paid

        fields = ["payment_state", "amount_paid", "amount_due"]
        if order.amount_due <= Decimal("0"):
            order.payment_state = Order.PaymentState.SETTLED
            events = OrderService.complete(
                order, config, PaymentLedgerService.payment_summary(order, config.currency), []
            )
            events.append(PaymentSettled(order_number=order.order_number, amount_paid=order.amount_paid))
            fields += ["status", "closed_at", "payment_method", "inventory_deducted"]
            action = OrderAuditEntry.Action.PAYMENT_SETTLED
            details = f"Settled: {order.payment_method}"
        else:
            order.payment_state = Order.PaymentState.PARTIAL
            events = [
                PartialPaymentRecorded(
                    order_number=order.order_number, amount=amount, amount_due=order.amount_due
                )
            ]
            action = OrderAuditEntry.Action.PARTIAL_PAYMENT
            details = f"{method} {format_money(amount, config.currency)} received, {format_money(order.amount_due, config.currency)} due"

        OrderRepository.compare_and_swap(order, fields)
        AuditService.record(
            order,
            action,
            details=details,
            performed_by=performed_by,
            method=method,
            amount=amount,
            amount_paid=order.amount_paid,
            amount_due=order.amount_due,
        )
        logger.info(
            f"Order #{order.order_number}: payment {amount} by {method}, paid {order.amount_paid}, due {order.amount_due}"
        )

        dispatch_on_commit(events, sender=PaymentLedgerService)
        return ServiceResult(order=order, events=events)
