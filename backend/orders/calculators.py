"""
Bill arithmetic for orders.

Pure functions over Decimals: nothing here touches the database, so the same
calculator prices a live order, a preview from the billing screen and a merged
pay-later receivable.

Usage:
    calculator = BillingCalculator.from_config(BillingConfig.for_restaurant(restaurant))
    bill = calculator.compute_lines(lines, discount_percent=Decimal("10"))
    shares = BillingCalculator.split_equal(bill.total, 3)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Sequence

from payments.money import ZERO, ceil_units, percent_of, round_half_up, to_decimal


@dataclass(frozen=True)
class BillLine:
    """One priced line: unit price already includes modifier deltas."""

    key: Hashable
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class BillBreakdown:
    subtotal: Decimal
    cgst: Decimal
    sgst: Decimal
    tax: Decimal
    service_charge: Decimal
    discount: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {name: str(getattr(self, name)) for name in self.__dataclass_fields__}


@dataclass
class SplitResult:
    shares: Dict[Hashable, Decimal]
    tax: Decimal
    service_charge: Decimal
    discount: Decimal
    total: Decimal
    unassigned: List[Hashable] = field(default_factory=list)

    @property
    def partially_assigned(self) -> bool:
        return bool(self.unassigned)


class BillingCalculator:
    """
    Computes subtotal, tax, service charge, discount and total.

    Rates are percentages. When either GST component is set, each component is
    rounded on its own and the flat tax_rate is ignored.
    """

    def __init__(
        self,
        tax_rate=Decimal("5"),
        cgst_rate=ZERO,
        sgst_rate=ZERO,
        service_charge_rate=ZERO,
    ):
        self.tax_rate = to_decimal(tax_rate)
        self.cgst_rate = to_decimal(cgst_rate)
        self.sgst_rate = to_decimal(sgst_rate)
        self.service_charge_rate = to_decimal(service_charge_rate)

        for name in ("tax_rate", "cgst_rate", "sgst_rate", "service_charge_rate"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

    @classmethod
    def from_config(cls, config) -> "BillingCalculator":
        return cls(
            tax_rate=config.tax_rate,
            cgst_rate=config.cgst_rate,
            sgst_rate=config.sgst_rate,
            service_charge_rate=config.service_charge_rate,
        )

    @staticmethod
    def unit_price(price, modifier_deltas: Iterable = ()) -> Decimal:
        return to_decimal(price) + sum((to_decimal(d) for d in modifier_deltas), ZERO)

    @staticmethod
    def line_total(price, quantity: int, modifier_deltas: Iterable = ()) -> Decimal:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        return BillingCalculator.unit_price(price, modifier_deltas) * quantity

    @staticmethod
    def subtotal(lines: Iterable[BillLine]) -> Decimal:
        return sum((line.line_total for line in lines), ZERO)

    def compute(
        self,
        subtotal,
        discount_amount=None,
        discount_percent=None,
        apply_tax: bool = True,
    ) -> BillBreakdown:
        """
        Price a subtotal.

        A flat discount_amount wins over discount_percent when both are given.

        Raises:
            ValueError: negative inputs, or a discount larger than the bill
        """
        subtotal = to_decimal(subtotal)
        if subtotal < 0:
            raise ValueError("subtotal cannot be negative")

        cgst = sgst = ZERO
        if not apply_tax:
            tax = ZERO
        elif self.cgst_rate > 0 or self.sgst_rate > 0:
            cgst = round_half_up(percent_of(subtotal, self.cgst_rate))
            sgst = round_half_up(percent_of(subtotal, self.sgst_rate))
            tax = cgst + sgst
        else:
            tax = round_half_up(percent_of(subtotal, self.tax_rate))

        service_charge = round_half_up(percent_of(subtotal, self.service_charge_rate))

        if discount_amount is not None:
            discount = to_decimal(discount_amount)
        elif discount_percent is not None:
            discount = round_half_up(percent_of(subtotal, discount_percent))
        else:
            discount = ZERO

        if discount < 0:
            raise ValueError("discount cannot be negative")

        total = subtotal + tax + service_charge - discount
        if total < 0:
            raise ValueError("discount exceeds the bill")

        return BillBreakdown(
            subtotal=subtotal,
            cgst=cgst,
            sgst=sgst,
            tax=tax,
            service_charge=service_charge,
            discount=discount,
            total=total,
        )

    def compute_lines(self, lines: Sequence[BillLine], **kwargs) -> BillBreakdown:
        return self.compute(self.subtotal(lines), **kwargs)

    @staticmethod
    def split_equal(total, payers: int) -> List[Decimal]:
        """
        Split a total between `payers` people.

        Everyone but the last pays ceil(total / payers); the last pays what
        remains, so the shares always add up to the total exactly. Shares are
        capped at what is left, which only matters for tiny totals.
        """
        if payers < 1:
            raise ValueError("at least one payer is required")

        total = to_decimal(total)
        per_person = ceil_units(total / payers)
        shares = []
        remaining = total
        for _ in range(payers - 1):
            share = min(per_person, remaining)
            shares.append(share)
            remaining -= share
        shares.append(remaining)
        return shares

    @staticmethod
    def split_by_item(
        lines: Sequence[BillLine],
        assignments: Mapping[Hashable, Hashable],
        bill: BillBreakdown,
    ) -> SplitResult:
        """
        Split by assigning each line to exactly one payer.

        A payer's share is the sum of their lines' totals. Tax, service charge
        and discount are reported for the whole bill only.

        Args:
            lines: the order's priced lines
            assignments: line key -> payer
            bill: the order's computed bill
        """
        keys = {line.key for line in lines}
        unknown = [key for key in assignments if key not in keys]
        if unknown:
            raise ValueError(f"unknown items in split: {unknown}")

        shares: Dict[Hashable, Decimal] = {}
        unassigned = []
        for line in lines:
            payer = assignments.get(line.key)
            if payer is None:
                unassigned.append(line.key)
                continue
            shares[payer] = shares.get(payer, ZERO) + line.line_total

        return SplitResult(
            shares=shares,
            tax=bill.tax,
            service_charge=bill.service_charge,
            discount=bill.discount,
            total=bill.total,
            unassigned=unassigned,
        )


def lines_for_items(items) -> List[BillLine]:
    """BillLines for saved OrderItems (modifiers should be prefetched)."""
    return [
        BillLine(key=item.id, unit_price=item.unit_price, quantity=item.quantity)
        for item in items
    ]


def compute_order_bill(order, calculator: BillingCalculator, items=None) -> BillBreakdown:
    """Price an order from its items and its stored discount inputs."""
    if items is None:
        items = order.items.prefetch_related("modifiers")
    return calculator.compute_lines(
        lines_for_items(items),
        discount_amount=order.discount_amount,
        discount_percent=order.discount_percent,
        apply_tax=order.apply_tax,
    )


def apply_bill(order, bill: BillBreakdown) -> None:
    order.subtotal = bill.subtotal
    order.tax = bill.tax
    order.service_charge = bill.service_charge
    order.discount = bill.discount
    order.total = bill.total


def combine_bills(*orders) -> BillBreakdown:
    """
    Add up the stored bills of several orders.

    Each order keeps the tax, service charge and discount it was priced with,
    so the combined total is exactly the sum of the order totals.
    """
    def total_of(name):
        return sum((getattr(order, name) for order in orders), ZERO)

    return BillBreakdown(
        subtotal=total_of("subtotal"),
        cgst=ZERO,
        sgst=ZERO,
        tax=total_of("tax"),
        service_charge=total_of("service_charge"),
        discount=total_of("discount"),
        total=total_of("total"),
    )
