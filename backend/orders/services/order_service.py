from django.db import transaction
from django.utils import timezone
import logging

from customers.services import LoyaltyService
from inventory.services import InventoryService
from payments.models import PartialPayment
from settings.config import BillingConfig
from orders.calculators import apply_bill
from orders.events import (
    LoyaltyUpdated,
    OrderCancelled,
    OrderClosed,
    OrderCreated,
    OrderStatusChanged,
    OrderUpdated,
    ServiceResult,
    TableChanged,
)
from orders.exceptions import AlreadyClosed, InvalidOrder, NotFound
from orders.models import Order, OrderAuditEntry, OrderItem, OrderItemModifier
from orders.repositories import OrderRepository, retry_on_conflict
from orders.signals import dispatch_on_commit
from .audit_service import AuditService
from .calculation_service import OrderCalculationService

logger = logging.getLogger(__name__)

Action = OrderAuditEntry.Action

TOTAL_FIELDS = ["subtotal", "tax", "service_charge", "discount", "total"]


class OrderService:
    """Core service for the order lifecycle: create, edit, kitchen progress, close, cancel."""

    EDITABLE_STATUSES = (
        Order.OrderStatus.ACTIVE,
        Order.OrderStatus.PREPARING,
        Order.OrderStatus.READY,
    )

    # Happy-path order; derived statuses only ever move right
    STATUS_RANK = {
        Order.OrderStatus.ACTIVE: 0,
        Order.OrderStatus.PREPARING: 1,
        Order.OrderStatus.READY: 2,
        Order.OrderStatus.SERVED: 3,
    }

    USER_CANCELLATION_REASONS = [
        reason for reason in Order.CancellationReason.values
        if reason != Order.CancellationReason.CONSOLIDATED
    ]

    @staticmethod
    def _ensure_not_terminal(order):
        if order.is_terminal:
            logger.warning(f"Order #{order.order_number}: refused, order is {order.status}")
            raise AlreadyClosed(order)

    @staticmethod
    def _finish(order, events):
        dispatch_on_commit(events, sender=OrderService)
        return ServiceResult(order=order, events=events)

    @staticmethod
    @transaction.atomic
    def create_order(
        restaurant,
        items,
        table_id=None,
        channel=Order.Channel.DINE_IN,
        customer_name="",
        customer_mobile="",
        adults=1,
        kids=0,
        waiter_name="",
        discount_amount=None,
        discount_percent=None,
        apply_tax=True,
        performed_by="",
    ) -> ServiceResult:
        """
        Creates an order, prices it and seats it at its table.

        Raises:
            InvalidOrder: no items, unknown channel, or the table already has
                a live order
            NotFound: unknown table
        """
        if channel not in Order.Channel.values:
            raise InvalidOrder(f"'{channel}' is not a valid channel")

        prepared = OrderCalculationService.prepare_items(restaurant, items)

        table = None
        if table_id is not None:
            table = OrderRepository.get_table(table_id, restaurant)
            occupant = table.occupying_order()
            if occupant is not None:
                logger.warning(
                    f"Table {table.number} is held by order #{occupant.order_number}, refusing new order"
                )
                raise InvalidOrder(f"Table {table.number} already has an active order")

        calculator = OrderCalculationService.calculator_for(restaurant)
        bill = OrderCalculationService.compute(
            calculator,
            [item.bill_line(key=index) for index, item in enumerate(prepared)],
            discount_amount=discount_amount,
            discount_percent=discount_percent,
            apply_tax=apply_tax,
        )

        order = Order(
            restaurant=restaurant,
            order_number=OrderRepository.next_order_number(restaurant),
            channel=channel,
            table=table,
            customer_name=(customer_name or "").strip(),
            customer_mobile=(customer_mobile or "").strip(),
            adults=adults,
            kids=kids,
            waiter_name=waiter_name or "",
            discount_amount=discount_amount,
            discount_percent=discount_percent,
            apply_tax=apply_tax,
        )
        apply_bill(order, bill)
        OrderRepository.put(order)

        now = timezone.now()
        for item_request in prepared:
            item = item_request.build(order, added_at=now)
            item.save()
            OrderItemModifier.objects.bulk_create(item_request.build_modifiers(item))

        if table is not None:
            table.occupy(order)
            table.save(update_fields=["status", "current_order"])

        AuditService.record(
            order,
            Action.ORDER_CREATED,
            details=f"Order #{order.order_number} created",
            performed_by=performed_by or waiter_name,
            table=table.number if table else None,
            channel=channel,
            items=len(prepared),
            total=order.total,
        )
        logger.info(f"Order #{order.order_number} created for {restaurant.slug}, total {order.total}")

        events = [OrderCreated(order_number=order.order_number, table_number=table.number if table else None)]
        return OrderService._finish(order, events)

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def update_order_items(order_id, items, restaurant=None, expected_version=None, performed_by="") -> ServiceResult:
        """
        Replaces an order's items and reprices it.

        Items sent with their existing `id` keep their added_at timestamp,
        kitchen status and price snapshot; items without an id are new;
        existing items left out are removed.
        """
        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)
        if order.status not in OrderService.EDITABLE_STATUSES:
            raise InvalidOrder(f"Items cannot be changed once an order is {order.get_status_display().lower()}")

        existing = {str(item.pk): item for item in order.items.prefetch_related("modifiers")}

        # Fill edits of existing items from their snapshot
        specs = []
        for spec in items or []:
            spec = dict(spec)
            if spec.get("id"):
                current = existing.get(str(spec["id"]))
                if current is None:
                    raise NotFound("Order item", spec["id"])
                spec["menu_item"] = None
                spec["name"] = current.name
                spec["price"] = current.price
                spec.setdefault("quantity", current.quantity)
                spec.setdefault("special_request", current.special_request)
            specs.append(spec)

        prepared = OrderCalculationService.prepare_items(order.restaurant, specs)

        now = timezone.now()
        kept, added, changed = set(), [], []
        for item_request in prepared:
            if item_request.item_id:
                item = existing[item_request.item_id]
                kept.add(item_request.item_id)
                if (item.quantity, item.special_request) != (item_request.quantity, item_request.special_request):
                    changed.append(item.name)
                item.quantity = item_request.quantity
                item.special_request = item_request.special_request
                item.save(update_fields=["quantity", "special_request"])
                if item_request.replace_modifiers:
                    item.modifiers.all().delete()
                    OrderItemModifier.objects.bulk_create(item_request.build_modifiers(item))
            else:
                item = item_request.build(order, added_at=now)
                item.save()
                OrderItemModifier.objects.bulk_create(item_request.build_modifiers(item))
                added.append(item.name)

        dropped = [item for key, item in existing.items() if key not in kept]
        removed = [item.name for item in dropped]
        OrderItem.objects.filter(pk__in=[item.pk for item in dropped]).delete()

        apply_bill(order, OrderCalculationService.recalculate(order))
        OrderRepository.compare_and_swap(order, TOTAL_FIELDS)

        AuditService.record(
            order,
            Action.ORDER_UPDATED,
            details=f"Items updated on order #{order.order_number}",
            performed_by=performed_by,
            added=added,
            removed=removed,
            changed=changed,
            total=order.total,
        )
        logger.info(f"Order #{order.order_number} items updated (+{len(added)} -{len(removed)})")
        events = [OrderUpdated(order_number=order.order_number, item_count=len(prepared))]
        return OrderService._finish(order, events)

    @staticmethod
    def derive_status(item_statuses):
        """Order status implied by its items' kitchen statuses, or None."""
        statuses = list(item_statuses)
        if statuses and all(s == OrderItem.ItemStatus.SERVED for s in statuses):
            return Order.OrderStatus.SERVED
        if OrderItem.ItemStatus.READY in statuses:
            return Order.OrderStatus.READY
        if OrderItem.ItemStatus.PREPARING in statuses:
            return Order.OrderStatus.PREPARING
        return None

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def advance_item_status(order_id, item_id, status, restaurant=None, expected_version=None, performed_by="") -> ServiceResult:
        """
        Sets one item's kitchen status and moves the order forward to match.

        Never moves an order backwards and never touches a pay-later order's
        status.
        """
        if status not in OrderItem.ItemStatus.values:
            raise InvalidOrder(f"'{status}' is not a valid item status")

        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)

        try:
            item = order.items.get(pk=item_id)
        except (OrderItem.DoesNotExist, ValueError):
            raise NotFound("Order item", item_id)

        previous_item_status = item.status
        item.status = status
        item.save(update_fields=["status"])

        events = []
        previous_status = order.status
        if order.status in OrderService.STATUS_RANK:
            derived = OrderService.derive_status(order.items.values_list("status", flat=True))
            if derived and OrderService.STATUS_RANK[derived] > OrderService.STATUS_RANK[order.status]:
                order.status = derived
                events.append(
                    OrderStatusChanged(
                        order_number=order.order_number,
                        previous_status=previous_status,
                        new_status=derived,
                    )
                )

        OrderRepository.compare_and_swap(order, ["status"])
        AuditService.record(
            order,
            Action.ITEM_STATUS_CHANGED,
            details=f"{item.name}: {previous_item_status} to {status}",
            performed_by=performed_by,
            item_id=item.pk,
            order_status=order.status,
        )
        if order.status != previous_status:
            logger.info(f"Order #{order.order_number} moved {previous_status} -> {order.status}")
        return OrderService._finish(order, events)

    @staticmethod
    def complete(order, config, payment_method, events):
        """
        Shared close path for direct closes and final settlements.

        Deducts inventory (guarded by inventory_deducted), updates loyalty,
        stamps closed_at and frees the table. The caller writes the order.
        """
        events += InventoryService.deduct(order, config)

        customer = LoyaltyService.update(
            order.restaurant, order.customer_name, order.customer_mobile, order.total, config
        )
        if customer is not None:
            events.append(
                LoyaltyUpdated(
                    order_number=order.order_number,
                    customer=customer.display_name,
                    points=customer.points,
                    tier=customer.tier,
                )
            )

        order.status = Order.OrderStatus.CLOSED
        order.closed_at = timezone.now()
        order.payment_method = payment_method
        OrderRepository.release_table(order)
        events.append(
            OrderClosed(order_number=order.order_number, total=order.total, payment_method=payment_method)
        )
        return events

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def close_order(order_id, payment_method, restaurant=None, expected_version=None, performed_by="") -> ServiceResult:
        """
        Takes full payment for a live order and closes it.

        Raises:
            AlreadyClosed: the order is closed or cancelled
            InvalidOrder: the order is pay-later (settle it instead) or no
                payment method was given
        """
        payment_method = (payment_method or "").strip()
        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)
        if order.status == Order.OrderStatus.PENDING_PAYMENT:
            raise InvalidOrder(f"Order #{order.order_number} is pay later, settle it instead")
        if not payment_method:
            raise InvalidOrder("A payment method is required")

        config = BillingConfig.for_restaurant(order.restaurant)
        events = OrderService.complete(order, config, payment_method, [])

        if order.total > 0:
            PartialPayment.objects.create(order=order, method=payment_method, amount=order.total)
        order.payment_state = Order.PaymentState.SETTLED
        order.amount_paid = order.total
        order.amount_due = 0

        OrderRepository.compare_and_swap(
            order,
            ["status", "closed_at", "payment_method", "payment_state", "amount_paid", "amount_due", "inventory_deducted"],
        )
        AuditService.record(
            order,
            Action.ORDER_CLOSED,
            details=f"Closed with {payment_method}",
            performed_by=performed_by,
            total=order.total,
        )
        logger.info(f"Order #{order.order_number} closed, {order.total} by {payment_method}")
        return OrderService._finish(order, events)

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def cancel_order(order_id, reason, note="", restaurant=None, expected_version=None, performed_by="") -> ServiceResult:
        """
        Cancels an order that has not closed.

        Restores inventory only if it was deducted.
        """
        if reason not in OrderService.USER_CANCELLATION_REASONS:
            raise InvalidOrder("A cancellation reason from the list is required")

        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)

        if order.amount_paid > 0:
            logger.warning(
                f"Order #{order.order_number} cancelled with {order.amount_paid} already paid"
            )

        InventoryService.restore(order)
        OrderRepository.release_table(order)

        previous_status = order.status
        order.status = Order.OrderStatus.CANCELLED
        order.cancellation_reason = reason
        order.cancellation_note = (note or "").strip()
        order.closed_at = timezone.now()
        OrderRepository.compare_and_swap(
            order, ["status", "cancellation_reason", "cancellation_note", "closed_at", "inventory_deducted"]
        )

        label = Order.CancellationReason(reason).label
        AuditService.record(
            order,
            Action.ORDER_CANCELLED,
            details=f"Cancelled: {label}" + (f" ({order.cancellation_note})" if order.cancellation_note else ""),
            performed_by=performed_by,
            reason=reason,
            previous_status=previous_status,
        )
        logger.info(f"Order #{order.order_number} cancelled ({reason})")
        return OrderService._finish(order, [OrderCancelled(order_number=order.order_number, reason=reason)])

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def change_table(order_id, table_id, restaurant=None, expected_version=None, performed_by="") -> ServiceResult:
        """Moves a live order to another free table."""
        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)
        if not order.is_live:
            raise InvalidOrder("Only seated orders can change table")

        new_table = OrderRepository.get_table(table_id, order.restaurant)
        if new_table.pk == order.table_id:
            raise InvalidOrder(f"Order is already at table {new_table.number}")
        occupant = new_table.occupying_order()
        if occupant is not None:
            raise InvalidOrder(f"Table {new_table.number} already has an active order")

        old_table = OrderRepository.release_table(order)
        new_table.occupy(order)
        new_table.save(update_fields=["status", "current_order"])
        order.table = new_table
        OrderRepository.compare_and_swap(order, ["table"])

        from_number = old_table.number if old_table else None
        AuditService.record(
            order,
            Action.TABLE_CHANGED,
            details=f"Moved from {from_number or 'no table'} to {new_table.number}",
            performed_by=performed_by,
            from_table=from_number,
            to_table=new_table.number,
        )
        logger.info(f"Order #{order.order_number} moved to table {new_table.number}")
        events = [TableChanged(order_number=order.order_number, from_table=from_number, to_table=new_table.number)]
        return OrderService._finish(order, events)

    @staticmethod
    @retry_on_conflict
    @transaction.atomic
    def update_customer(
        order_id,
        customer_name=None,
        customer_mobile=None,
        adults=None,
        kids=None,
        restaurant=None,
        expected_version=None,
        performed_by="",
    ) -> ServiceResult:
        """Edits guest details. Fields left as None are unchanged."""
        order = OrderRepository.get_for_update(order_id, restaurant, expected_version)
        OrderService._ensure_not_terminal(order)

        changes = {}
        for field, value in (
            ("customer_name", customer_name),
            ("customer_mobile", customer_mobile),
            ("adults", adults),
            ("kids", kids),
        ):
            if value is None:
                continue
            if isinstance(value, str):
                value = value.strip()
            if getattr(order, field) != value:
                changes[field] = value
                setattr(order, field, value)

        if changes:
            OrderRepository.compare_and_swap(order, list(changes))
            AuditService.record(
                order,
                Action.CUSTOMER_UPDATED,
                details="Guest details updated",
                performed_by=performed_by,
                fields=sorted(changes),
            )
        return OrderService._finish(order, [])
