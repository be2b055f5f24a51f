from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging

from products.models import MenuItem
from settings.config import BillingConfig
from payments.money import ZERO
from orders.calculators import BillBreakdown, BillingCalculator, BillLine, compute_order_bill, lines_for_items
from orders.exceptions import InvalidOrder
from orders.models import OrderItem, OrderItemModifier
from orders.repositories import OrderRepository

logger = logging.getLogger(__name__)


@dataclass
class PreparedItem:
    """A validated line item request, not yet saved."""

    menu_item: Optional[MenuItem]
    name: str
    price: Decimal
    quantity: int
    special_request: str = ""
    modifiers: List[dict] = field(default_factory=list)
    item_id: Optional[str] = None
    replace_modifiers: bool = True

    @property
    def is_custom(self):
        return self.menu_item is None

    def bill_line(self, key=None) -> BillLine:
        deltas = [m["price_delta"] for m in self.modifiers]
        return BillLine(
            key=key if key is not None else self.item_id,
            unit_price=BillingCalculator.unit_price(self.price, deltas),
            quantity=self.quantity,
        )

    def build(self, order, added_at=None):
        item = OrderItem(
            order=order,
            menu_item=self.menu_item,
            is_custom=self.is_custom,
            name=self.name,
            price=self.price,
            quantity=self.quantity,
            special_request=self.special_request,
        )
        if added_at is not None:
            item.added_at = added_at
        return item

    def build_modifiers(self, item):
        return [OrderItemModifier(order_item=item, **modifier) for modifier in self.modifiers]


def _decimal(value, label):
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidOrder(f"Invalid {label}: {value!r}")


class OrderCalculationService:
    """Turns item requests into priced lines and bills."""

    @staticmethod
    def calculator_for(restaurant) -> BillingCalculator:
        return BillingCalculator.from_config(BillingConfig.for_restaurant(restaurant))

    @staticmethod
    def prepare_items(restaurant, item_specs) -> List[PreparedItem]:
        """
        Validate item requests and snapshot menu names and prices.

        Each spec is a dict with either `menu_item` (id) or, for a custom item,
        `name` and `price`; plus `quantity`, optional `special_request`,
        `modifiers` ([{group_name, option_name, price_delta}]) and, when
        editing, the existing item's `id`.
        """
        if not item_specs:
            raise InvalidOrder("Order must contain at least one item")

        menu_ids = {spec["menu_item"] for spec in item_specs if spec.get("menu_item")}
        menu = {
            str(m.pk): m
            for m in MenuItem.all_objects.filter(restaurant=restaurant, pk__in=menu_ids)
        }

        prepared = []
        for spec in item_specs:
            quantity = spec.get("quantity", 1)
            if not isinstance(quantity, int) or quantity < 1:
                raise InvalidOrder(f"Invalid quantity: {quantity!r}")

            menu_item = None
            if spec.get("menu_item"):
                menu_item = menu.get(str(spec["menu_item"]))
                if menu_item is None:
                    raise InvalidOrder(f"Unknown menu item {spec['menu_item']}")
                if not menu_item.is_available:
                    raise InvalidOrder(f"{menu_item.name} is not available")
                name = menu_item.name
                price = menu_item.price
            else:
                name = (spec.get("name") or "").strip()
                if not name or spec.get("price") is None:
                    raise InvalidOrder("Custom items need a name and a price")
                price = _decimal(spec["price"], "price")
                if price < 0:
                    raise InvalidOrder("Item price cannot be negative")

            modifiers = [
                {
                    "group_name": m.get("group_name", ""),
                    "option_name": m["option_name"],
                    "price_delta": _decimal(m.get("price_delta", "0"), "modifier price"),
                }
                for m in spec.get("modifiers") or []
            ]

            prepared.append(
                PreparedItem(
                    menu_item=menu_item,
                    name=name,
                    price=price,
                    quantity=quantity,
                    special_request=(spec.get("special_request") or "").strip(),
                    modifiers=modifiers,
                    item_id=str(spec["id"]) if spec.get("id") else None,
                    replace_modifiers="modifiers" in spec,
                )
            )
        return prepared

    @staticmethod
    def compute(calculator, lines, discount_amount=None, discount_percent=None, apply_tax=True):
        try:
            return calculator.compute_lines(
                lines,
                discount_amount=discount_amount,
                discount_percent=discount_percent,
                apply_tax=apply_tax,
            )
        except ValueError as e:
            raise InvalidOrder(str(e))

    @staticmethod
    def compute_bill(restaurant, item_specs, discount_amount=None, discount_percent=None, apply_tax=True):
        """Price a prospective order without saving anything."""
        prepared = OrderCalculationService.prepare_items(restaurant, item_specs)
        lines = [item.bill_line(key=index) for index, item in enumerate(prepared)]
        return OrderCalculationService.compute(
            OrderCalculationService.calculator_for(restaurant),
            lines,
            discount_amount=discount_amount,
            discount_percent=discount_percent,
            apply_tax=apply_tax,
        )

    @staticmethod
    def split_bill(order_id, mode, payers=None, assignments=None, restaurant=None):
        """
        Split an order's bill.

        mode "equal" needs `payers` (a count). mode "by_item" needs
        `assignments` mapping item id -> payer label.

        Returns:
            dict ready for the API: mode, total, shares and, for by_item,
            the aggregate tax/service/discount and partially_assigned flag
        """
        order = OrderRepository.get(order_id, restaurant=restaurant)
        items = list(order.items.prefetch_related("modifiers"))
        # Split what was billed, not what current settings would bill
        bill = BillBreakdown(
            subtotal=order.subtotal,
            cgst=ZERO,
            sgst=ZERO,
            tax=order.tax,
            service_charge=order.service_charge,
            discount=order.discount,
            total=order.total,
        )

        if mode == "equal":
            if not isinstance(payers, int) or payers < 1:
                raise InvalidOrder("Equal split needs a payer count of at least 1")
            shares = BillingCalculator.split_equal(bill.total, payers)
            return {
                "mode": mode,
                "total": bill.total,
                "shares": shares,
            }

        if mode == "by_item":
            assignments = {str(k): v for k, v in (assignments or {}).items()}
            lines = [BillLine(key=str(line.key), unit_price=line.unit_price, quantity=line.quantity)
                     for line in lines_for_items(items)]
            try:
                result = BillingCalculator.split_by_item(lines, assignments, bill)
            except ValueError as e:
                raise InvalidOrder(str(e))
            return {
                "mode": mode,
                "total": result.total,
                "shares": result.shares,
                "tax": result.tax,
                "service_charge": result.service_charge,
                "discount": result.discount,
                "unassigned": result.unassigned,
                "partially_assigned": result.partially_assigned,
            }

        raise InvalidOrder(f"Unknown split mode '{mode}'")

    @staticmethod
    def recalculate(order, calculator=None):
        """Recompute an order's bill from its saved items."""
        calculator = calculator or OrderCalculationService.calculator_for(order.restaurant)
        try:
            return compute_order_bill(order, calculator)
        except ValueError as e:
            raise InvalidOrder(str(e))
