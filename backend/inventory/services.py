from collections import defaultdict
from decimal import Decimal
from django.db import transaction
import logging

from orders.events import LowStockCrossed, OutOfStock
from products.models import MenuItem
from .models import InventoryItem, RecipeItem, StockMovement

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class InventoryService:
    """
    Stock bookkeeping driven by orders.

    deduct() runs when an order closes and restore() when a closed order's
    stock has to be put back. Both only change the order in memory
    (inventory_deducted); the caller writes the order.
    """

    @staticmethod
    def _stock_alerts(order, name, previous_quantity, new_quantity, threshold):
        """Events for a quantity that crossed its threshold or hit zero."""
        if previous_quantity > 0 and new_quantity <= 0:
            logger.warning(f"Order #{order.order_number}: {name} is out of stock")
            return [OutOfStock(order_number=order.order_number, item_name=name)]
        if previous_quantity > threshold and 0 < new_quantity <= threshold:
            logger.warning(
                f"Order #{order.order_number}: {name} fell to {new_quantity} (threshold {threshold})"
            )
            return [
                LowStockCrossed(
                    order_number=order.order_number,
                    item_name=name,
                    quantity=new_quantity,
                    threshold=threshold,
                )
            ]
        return []

    @staticmethod
    def _apply(order, target, new_quantity, operation_type):
        """Set target.quantity-like field and record the movement."""
        is_menu_item = isinstance(target, MenuItem)
        field = "stock_quantity" if is_menu_item else "quantity"
        previous_quantity = getattr(target, field)
        setattr(target, field, new_quantity)
        target.save(update_fields=[field])

        StockMovement.all_objects.create(
            restaurant_id=order.restaurant_id,
            order=order,
            inventory_item=None if is_menu_item else target,
            menu_item=target if is_menu_item else None,
            operation_type=operation_type,
            quantity_change=new_quantity - previous_quantity,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
        )
        return previous_quantity

    @staticmethod
    def required_quantities(order):
        """
        What closing `order` consumes.

        Returns (ingredients, menu_stock): inventory item id -> quantity and
        menu item id -> units sold. Custom items consume nothing.
        """
        sold = defaultdict(Decimal)
        for menu_item_id, quantity in order.items.exclude(menu_item=None).values_list("menu_item_id", "quantity"):
            sold[menu_item_id] += Decimal(quantity)

        ingredients = defaultdict(Decimal)
        for recipe in RecipeItem.objects.filter(menu_item_id__in=sold.keys()):
            ingredients[recipe.inventory_item_id] += recipe.quantity * sold[recipe.menu_item_id]
        return dict(ingredients), dict(sold)

    @staticmethod
    @transaction.atomic
    def deduct(order, config):
        """
        Consume recipe ingredients and tracked menu stock for a closing order.

        Quantities are floored at zero: an order still closes when recorded
        stock is short. A no-op when the order was already deducted or
        inventory tracking is switched off.

        Returns:
            list of LowStockCrossed / OutOfStock events
        """
        if order.inventory_deducted:
            logger.info(f"Order #{order.order_number}: inventory already deducted, skipping")
            return []
        if not config.enable_inventory:
            return []

        ingredients, sold = InventoryService.required_quantities(order)
        events = []

        # Lock in primary key order so concurrent closes cannot deadlock
        stock_items = InventoryItem.all_objects.select_for_update().filter(
            pk__in=ingredients.keys()
        ).order_by("pk")
        for stock in stock_items:
            new_quantity = max(ZERO, stock.quantity - ingredients[stock.pk])
            previous_quantity = InventoryService._apply(
                order, stock, new_quantity, StockMovement.Operation.ORDER_DEDUCTION
            )
            events += InventoryService._stock_alerts(
                order, stock.name, previous_quantity, new_quantity, stock.low_stock_threshold
            )

        menu_items = MenuItem.all_objects.select_for_update().filter(
            pk__in=sold.keys(), stock_quantity__isnull=False
        ).order_by("pk")
        for menu_item in menu_items:
            new_quantity = max(ZERO, menu_item.stock_quantity - sold[menu_item.pk])
            previous_quantity = InventoryService._apply(
                order, menu_item, new_quantity, StockMovement.Operation.ORDER_DEDUCTION
            )
            events += InventoryService._stock_alerts(
                order, menu_item.name, previous_quantity, new_quantity, menu_item.low_stock_threshold
            )

        order.inventory_deducted = True
        logger.info(
            f"Order #{order.order_number}: deducted {len(ingredients)} ingredients and {len(menu_items)} menu stock items"
        )
        return events

    @staticmethod
    @transaction.atomic
    def restore(order):
        """
        Put back exactly what the order's deductions removed.

        Works from the recorded movements rather than the recipe, so recipe
        edits and zero-floored deductions are reversed correctly.
        """
        if not order.inventory_deducted:
            return []

        net_ingredients = defaultdict(Decimal)
        net_menu_stock = defaultdict(Decimal)
        for movement in StockMovement.all_objects.filter(order=order):
            if movement.inventory_item_id is not None:
                net_ingredients[movement.inventory_item_id] += movement.quantity_change
            elif movement.menu_item_id is not None:
                net_menu_stock[movement.menu_item_id] += movement.quantity_change

        for stock in InventoryItem.all_objects.select_for_update().filter(
            pk__in=net_ingredients.keys()
        ).order_by("pk"):
            if net_ingredients[stock.pk]:
                InventoryService._apply(
                    order, stock, stock.quantity - net_ingredients[stock.pk],
                    StockMovement.Operation.ORDER_RESTORATION,
                )

        for menu_item in MenuItem.all_objects.select_for_update().filter(
            pk__in=net_menu_stock.keys(), stock_quantity__isnull=False
        ).order_by("pk"):
            if net_menu_stock[menu_item.pk]:
                InventoryService._apply(
                    order, menu_item, menu_item.stock_quantity - net_menu_stock[menu_item.pk],
                    StockMovement.Operation.ORDER_RESTORATION,
                )

        order.inventory_deducted = False
        logger.info(f"Order #{order.order_number}: inventory restored")
        return []
