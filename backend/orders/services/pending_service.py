from django.db import transaction
from django.utils import timezone
import logging

from orders.calculators import apply_bill, combine_bills
from orders.events import OrderConsolidated, PaymentPending, ServiceResult
from orders.exceptions import InvalidOrder
from orders.models import ConsolidatedOrder, Order, OrderAuditEntry, OrderItem, OrderItemModifier
from orders.repositories import OrderRepository, retry_on_conflict
from orders.signals import dispatch_on_commit
from .audit_service import AuditService
from .order_service import TOTAL_FIELDS, OrderService

logger = logging.getLogger(__name__)

Action = OrderAuditEntry.Action


class PendingPaymentService:
    """
    Pay later: turns an order into a receivable, merging it into the guest's
    existing receivable when one is open under the same mobile number.
    """

    @staticmethod
    def find_open_receivable(restaurant, mobile, exclude_order=None):
        """Latest pending order for a mobile number. Blank mobiles never match."""
        mobile = (mobile or "").strip()
        if not mobile:
            return None
        queryset = Order.all_objects.select_for_update().filter(
            restaurant=restaurant,
            status=Order.OrderStatus.PENDING_PAYMENT,
            customer_mobile=mobile,
        )
        if exclude_order is not None:
            queryset = queryset.exclude(pk=exclude_order.pk)
        return queryset.order_by("-created_at").first()

    @staticmethod
    def _copy_items(source, target):
        """Copy source's items onto target as new items stamped now."""
        now = timezone.now()
        copied = 0
        for item in source.items.prefetch_related("modifiers"):
            modifiers = list(item.modifiers.all())
            clone = OrderItem.objects.create(
                order=target,
                menu_item=item.menu_item,
                is_custom=item.is_custom,
                name=item.name,
                price=item.price,
                quantity=item.quantity,
                special_request=item.special_request,
                status=item.status,
                added_at=now,
            )
            OrderItemModifier.objects.bulk_create([
                OrderItemModifier(
                    order_item=clone,
                    group_name=m.group_name,
                    option_name=m.option_name,
                    price_delta=m.price_delta,
                )
                for m in modifiers
            ])
            copied += 1
        return copied

    @staticmethod
    def _consolidate(order, target, performed_by):
        copied = PendingPaymentService._copy_items(order, target)
        ConsolidatedOrder.objects.create(
            target=target,
            source=order,
            order_number=order.order_number,
            created_at=order.created_at,
        )

        previous_total = target.total
        # The guest owes what each submission was billed, discounts included
        apply_bill(target, combine_bills(target, order))
        target.amount_due = target.total - target.amount_paid
        if not target.customer_name and order.customer_name:
            target.customer_name = order.customer_name
        OrderRepository.compare_and_swap(target, TOTAL_FIELDS + ["amount_due", "customer_name"])

        OrderRepository.release_table(order)
        order.status = Order.OrderStatus.CANCELLED
        order.cancellation_reason = Order.CancellationReason.CONSOLIDATED
        order.cancellation_note = f"Consolidated into order #{target.order_number}"
        order.consolidated_into = target
        order.closed_at = timezone.now()
        OrderRepository.compare_and_swap(
            order,
            ["status", "cancellation_reason", "cancellation_note", "consolidated_into", "closed_at", "customer_name", "customer_mobile"],
        )

        AuditService.record(
            target,
            Action.ORDER_CONSOLIDATED,
            details=f"Order #{order.order_number} merged in",
            performed_by=performed_by,
            source_order=order.pk,
            source_order_number=order.order_number,
            items_added=copied,
            previous_total=previous_total,
            total=target.total,
            amount_due=target.amount_due,
        )
        AuditService.record(
            order,
            Action.ORDER_CONSOLIDATED,
            details=f"Merged into order #{target.order_number}",
            performed_by=performed_by,
            target_order=target.pk,
            target_order_number=target.order_number,
        )
        logger.info(
            f"Order #{order.order_number} consolidated into pending order #{target.order_number}, due {target.amount_due}"
        )
        return [
            OrderConsolidated(
                order_number=order.order_number,
                target_order_number=target.order_number,
                amount_due=target.amount_due,
            )
        ]

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def mark_pending_payment(
        order_id,
        customer_name=None,
        customer_mobile=None,
        restaurant=None,
        expected_version=None,
        performed_by="",
    ) -> ServiceResult:
        """
        Defers payment for an order and frees its table.

        Returns the receivable: the guest's existing pending order when the
        submitted order was merged into it, otherwise the submitted order.
        """
        order = OrderRepository.get(order_id, restaurant=restaurant)
        # Restaurant lock first: two submissions for one mobile must not both create a receivable
        OrderRepository.lock_restaurant(order.restaurant)
        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)
        if order.status == Order.OrderStatus.PENDING_PAYMENT:
            raise InvalidOrder(f"Order #{order.order_number} is already pay later")

        if customer_name is not None:
            order.customer_name = customer_name.strip()
        if customer_mobile is not None:
            order.customer_mobile = customer_mobile.strip()

        target = PendingPaymentService.find_open_receivable(
            order.restaurant, order.customer_mobile, exclude_order=order
        )
        if target is not None:
            events = PendingPaymentService._consolidate(order, target, performed_by)
            dispatch_on_commit(events, sender=PendingPaymentService)
            return ServiceResult(order=target, events=events)

        OrderRepository.release_table(order)
        order.status = Order.OrderStatus.PENDING_PAYMENT
        order.payment_state = Order.PaymentState.PARTIAL
        order.amount_paid = 0
        order.amount_due = order.total
        OrderRepository.compare_and_swap(
            order, ["status", "payment_state", "amount_paid", "amount_due", "customer_name", "customer_mobile"]
        )
        AuditService.record(
            order,
            Action.PAYMENT_PENDING,
            details=f"Pay later, {order.amount_due} due",
            performed_by=performed_by,
            customer_mobile=order.customer_mobile,
            amount_due=order.amount_due,
        )
        logger.info(f"Order #{order.order_number} marked pay later, due {order.amount_due}")

        events = [PaymentPending(order_number=order.order_number, amount_due=order.amount_due)]
        dispatch_on_commit(events, sender=PendingPaymentService)
        return ServiceResult(order=order, events=events)

    @staticmethod
    def list_pending(restaurant):
        """Open receivables, newest first."""
        return (
            Order.all_objects.filter(restaurant=restaurant, status=Order.OrderStatus.PENDING_PAYMENT)
            .select_related("table")
            .prefetch_related("partial_payments", "consolidated_orders")
            .order_by("-created_at")
        )
