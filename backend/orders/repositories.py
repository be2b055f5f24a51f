"""
Storage access for orders.

Services read an order through OrderRepository, mutate it in memory and write
it back with compare_and_swap, which only succeeds if nobody else wrote the
order in between. retry_on_conflict re-runs a whole operation with fresh state
when that check fails.
"""

import functools
import logging

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from restaurants.models import Restaurant
from .exceptions import ConcurrentModification, NotFound
from .models import Order, OrderSequence, Table

logger = logging.getLogger(__name__)


class OrderRepository:

    @staticmethod
    def get(order_id, restaurant=None) -> Order:
        queryset = Order.all_objects.select_related("table", "restaurant")
        if restaurant is not None:
            queryset = queryset.filter(restaurant=restaurant)
        try:
            return queryset.get(pk=order_id)
        except (Order.DoesNotExist, ValueError):
            raise NotFound("Order", order_id)

    @staticmethod
    def get_for_update(order_id, restaurant=None, expected_version=None) -> Order:
        """
        Read and row-lock an order for the rest of the transaction.

        Raises ConcurrentModification straight away if the caller pinned a
        version that is no longer current.
        """
        queryset = Order.all_objects.select_for_update()
        if restaurant is not None:
            queryset = queryset.filter(restaurant=restaurant)
        try:
            order = queryset.get(pk=order_id)
        except (Order.DoesNotExist, ValueError):
            raise NotFound("Order", order_id)

        if expected_version is not None and order.version != int(expected_version):
            logger.warning(
                f"Order #{order.order_number}: expected version {expected_version}, found {order.version}"
            )
            raise ConcurrentModification(order.pk, expected_version, retryable=False)
        return order

    @staticmethod
    def put(order: Order) -> Order:
        """Insert a new order. Existing orders go through compare_and_swap."""
        order.version = 0
        order.save(force_insert=True)
        return order

    @staticmethod
    def compare_and_swap(order: Order, fields) -> Order:
        """
        Write `fields` of an order only if its version is unchanged.

        On success the in-memory order carries the new version. order_number is
        never written here.
        """
        fields = [f for f in fields if f not in ("order_number", "version", "id")]
        values = {name: getattr(order, name) for name in fields}
        values["updated_at"] = timezone.now()

        rows = Order.all_objects.filter(pk=order.pk, version=order.version).update(
            version=F("version") + 1, **values
        )
        if rows == 0:
            logger.warning(f"Order #{order.order_number}: version {order.version} is stale")
            raise ConcurrentModification(order.pk, order.version)

        order.version += 1
        order.updated_at = values["updated_at"]
        return order

    @staticmethod
    def next_order_number(restaurant: Restaurant) -> int:
        """Atomically take the next order number for a restaurant."""
        OrderSequence.objects.get_or_create(restaurant=restaurant)
        OrderSequence.objects.filter(restaurant=restaurant).update(last_number=F("last_number") + 1)
        return OrderSequence.objects.values_list("last_number", flat=True).get(restaurant=restaurant)

    @staticmethod
    def lock_restaurant(restaurant: Restaurant) -> Restaurant:
        """Serialise restaurant-wide operations such as pay-later consolidation."""
        return Restaurant.objects.select_for_update().get(pk=restaurant.pk)

    @staticmethod
    def get_table(table_id, restaurant, for_update=True) -> Table:
        queryset = Table.all_objects.filter(restaurant=restaurant)
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.select_related("current_order").get(pk=table_id)
        except (Table.DoesNotExist, ValueError):
            raise NotFound("Table", table_id)

    @staticmethod
    def release_table(order: Order):
        """
        Free the order's table if the order is what occupies it.

        A table that is empty, reserved or seating someone else is left alone.
        Pay-later orders gave their table up when they were deferred.
        """
        if order.table_id is None:
            return None
        table = Table.all_objects.select_for_update().get(pk=order.table_id)
        if order.status == Order.OrderStatus.PENDING_PAYMENT:
            return table
        if table.current_order_id == order.pk:
            table.release()
            table.save(update_fields=["status", "current_order"])
        return table


def retry_on_conflict(func=None, *, attempts=None):
    """
    Re-run an operation when its compare-and-swap loses a race.

    Wrap it around the atomic block so every attempt starts a fresh
    transaction and reads fresh state. Conflicts the caller caused by pinning
    an expected_version are not retried.
    """
    if func is None:
        return functools.partial(retry_on_conflict, attempts=attempts)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        max_attempts = attempts or getattr(settings, "ORDER_CAS_MAX_RETRIES", 3)
        for attempt in range(1, max_attempts + 1):
            try:
                return func(*args, **kwargs)
            except ConcurrentModification as e:
                if not e.retryable or attempt == max_attempts:
                    raise
                logger.info(f"{func.__name__}: retrying after conflict (attempt {attempt} of {max_attempts})")

    return wrapper
