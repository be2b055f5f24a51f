import uuid
from decimal import Decimal
from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantScopedManager


class Table(models.Model):
    class TableStatus(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        OCCUPIED = "OCCUPIED", _("Occupied")
        RESERVED = "RESERVED", _("Reserved")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="tables",
    )
    number = models.CharField(max_length=20, help_text=_("Label printed on the table, e.g. T4."))
    capacity = models.PositiveSmallIntegerField(default=4)
    status = models.CharField(
        max_length=10, choices=TableStatus.choices, default=TableStatus.AVAILABLE
    )
    current_order = models.ForeignKey(
        "Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["number"]
        constraints = [
            models.UniqueConstraint(fields=["restaurant", "number"], name="unique_table_number_per_restaurant"),
        ]

    def occupying_order(self):
        """Return the live order seated here, ignoring a stale reference."""
        order = self.current_order
        if order is not None and order.is_live:
            return order
        return None

    def occupy(self, order):
        self.status = self.TableStatus.OCCUPIED
        self.current_order = order

    def release(self):
        self.status = self.TableStatus.AVAILABLE
        self.current_order = None

    def __str__(self):
        return f"Table {self.number}"


class OrderSequence(models.Model):
    """Per-restaurant counter behind order numbers."""

    restaurant = models.OneToOneField(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="order_sequence",
    )
    last_number = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.restaurant} #{self.last_number}"


class Order(models.Model):
    # --- Status Fields ---
    class OrderStatus(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")  # Taken, not yet in the kitchen
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        SERVED = "SERVED", _("Served")
        PENDING_PAYMENT = "PENDING_PAYMENT", _("Pending Payment")  # Pay later receivable
        CLOSED = "CLOSED", _("Closed")
        CANCELLED = "CANCELLED", _("Cancelled")

    class Channel(models.TextChoices):
        DINE_IN = "DINE_IN", _("Dine In")
        TAKE_AWAY = "TAKE_AWAY", _("Take Away")
        HOME_DELIVERY = "HOME_DELIVERY", _("Home Delivery")
        SWIGGY = "SWIGGY", _("Swiggy")
        ZOMATO = "ZOMATO", _("Zomato")
        OTHER = "OTHER", _("Other")

    class PaymentState(models.TextChoices):
        NOT_STARTED = "NOT_STARTED", _("Not Started")
        PARTIAL = "PARTIAL", _("Partially Paid")
        SETTLED = "SETTLED", _("Settled")

    class CancellationReason(models.TextChoices):
        MISSING_INGREDIENTS = "KITCHEN_MISSING_INGREDIENTS", _("Kitchen Issue: Missing ingredients")
        CHEF_NOT_AVAILABLE = "KITCHEN_CHEF_NOT_AVAILABLE", _("Kitchen Issue: Chef not available")
        EQUIPMENT_MALFUNCTION = "KITCHEN_EQUIPMENT_MALFUNCTION", _("Kitchen Issue: Equipment malfunction")
        TOO_COLD = "KITCHEN_TOO_COLD", _("Kitchen Issue: Too cold")
        TASTE_ISSUE = "KITCHEN_TASTE_ISSUE", _("Kitchen Issue: Issue with taste")
        HAIR_IN_DISH = "KITCHEN_HAIR_IN_DISH", _("Kitchen Issue: Hair in dish")
        ROTTEN_INGREDIENTS = "KITCHEN_ROTTEN_INGREDIENTS", _("Kitchen Issue: Rotten ingredients")
        OWNER_CANCELLED = "OWNER_CANCELLED", _("Owner Cancelled")
        CUSTOMER_DISPUTE = "CUSTOMER_DISPUTE", _("Customer Dispute")
        SOLD_OUT = "SOLD_OUT", _("Sold Out")
        SCANNED_AND_LEFT = "SCANNED_AND_LEFT", _("Scanned and Left")
        OTHER = "OTHER", _("Other")
        # Set by the system when a pay-later order is folded into another one
        CONSOLIDATED = "CONSOLIDATED", _("Consolidated")

    LIVE_STATUSES = (
        OrderStatus.ACTIVE,
        OrderStatus.PREPARING,
        OrderStatus.READY,
        OrderStatus.SERVED,
    )
    TERMINAL_STATUSES = (OrderStatus.CLOSED, OrderStatus.CANCELLED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="orders",
    )
    order_number = models.PositiveIntegerField(
        editable=False,
        help_text=_("Sequential per restaurant; assigned once and never reused."),
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.ACTIVE
    )
    channel = models.CharField(
        max_length=20, choices=Channel.choices, default=Channel.DINE_IN
    )
    table = models.ForeignKey(
        Table,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # --- Guest ---
    customer_name = models.CharField(max_length=200, blank=True)
    customer_mobile = models.CharField(max_length=20, blank=True, db_index=True)
    adults = models.PositiveSmallIntegerField(default=1)
    kids = models.PositiveSmallIntegerField(default=0)
    waiter_name = models.CharField(max_length=100, blank=True)

    # --- Discount inputs ---
    discount_amount = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text=_("Flat discount. Takes precedence over discount_percent."),
    )
    discount_percent = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True,
    )
    apply_tax = models.BooleanField(default=True)

    # --- Computed totals ---
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    service_charge = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    # --- Payment ledger ---
    payment_state = models.CharField(
        max_length=20, choices=PaymentState.choices, default=PaymentState.NOT_STARTED
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount_due = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    # Settled receivables list every partial payment here
    payment_method = models.TextField(blank=True)

    # --- Lifecycle bookkeeping ---
    inventory_deducted = models.BooleanField(default=False)
    version = models.PositiveIntegerField(default=0)
    consolidated_into = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="merged_orders",
    )
    cancellation_reason = models.CharField(
        max_length=40, choices=CancellationReason.choices, blank=True
    )
    cancellation_note = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "order_number"], name="unique_order_number_per_restaurant"
            ),
        ]
        indexes = [
            models.Index(fields=["restaurant", "status"], name="order_restaurant_status_idx"),
            models.Index(fields=["restaurant", "customer_mobile", "status"], name="order_mobile_status_idx"),
        ]

    @property
    def is_live(self):
        return self.status in self.LIVE_STATUSES

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def payment_ledger(self):
        """The payment state as a NotStarted, Partial or Settled value."""
        from payments.states import payment_state_for

        return payment_state_for(self)

    def __str__(self):
        return f"Order #{self.order_number} ({self.get_status_display()})"


class OrderItem(models.Model):
    class ItemStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        SERVED = "SERVED", _("Served")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        "products.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    is_custom = models.BooleanField(
        default=False, help_text=_("Ad hoc item typed in at the counter, not on the menu.")
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Unit price snapshot taken when the item was ordered."),
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    special_request = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=10, choices=ItemStatus.choices, default=ItemStatus.PENDING
    )
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["added_at", "id"]

    @property
    def unit_price(self):
        return self.price + sum((m.price_delta for m in self.modifiers.all()), Decimal("0"))

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.name}"


class OrderItemModifier(models.Model):
    order_item = models.ForeignKey(
        OrderItem, on_delete=models.CASCADE, related_name="modifiers"
    )
    group_name = models.CharField(max_length=100, blank=True)
    option_name = models.CharField(max_length=100)
    price_delta = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.group_name}: {self.option_name} ({self.price_delta:+})"


class OrderAuditEntry(models.Model):
    """
    Append-only log of everything that happened to an order.

    details is the short sentence staff read on screen; metadata keeps the
    mechanical detail (ids, versions, amounts) for later investigation.
    """

    class Action(models.TextChoices):
        ORDER_CREATED = "ORDER_CREATED", _("Order Created")
        ORDER_UPDATED = "ORDER_UPDATED", _("Order Updated")
        ITEM_STATUS_CHANGED = "ITEM_STATUS_CHANGED", _("Item Status Changed")
        STATUS_CHANGED = "STATUS_CHANGED", _("Status Changed")
        TABLE_CHANGED = "TABLE_CHANGED", _("Table Changed")
        CUSTOMER_UPDATED = "CUSTOMER_UPDATED", _("Customer Updated")
        ORDER_CLOSED = "ORDER_CLOSED", _("Order Closed")
        ORDER_CANCELLED = "ORDER_CANCELLED", _("Order Cancelled")
        ORDER_CONSOLIDATED = "ORDER_CONSOLIDATED", _("Order Consolidated")
        PAYMENT_PENDING = "PAYMENT_PENDING", _("Payment Pending")
        PARTIAL_PAYMENT = "PARTIAL_PAYMENT", _("Partial Payment")
        PAYMENT_SETTLED = "PAYMENT_SETTLED", _("Payment Settled")

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="audit_log")
    action = models.CharField(max_length=30, choices=Action.choices)
    performed_by = models.CharField(max_length=100, blank=True)
    performed_at = models.DateTimeField(default=timezone.now)
    details = models.CharField(max_length=500, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["performed_at", "id"]
        verbose_name_plural = "Order audit entries"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError("Audit entries cannot be modified.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.action} on order {self.order_id} at {self.performed_at:%Y-%m-%d %H:%M}"


class ConsolidatedOrder(models.Model):
    """An order that was merged into a pending (pay later) order."""

    target = models.ForeignKey(
        Order, on_delete=models.CASCADE, related_name="consolidated_orders"
    )
    source = models.ForeignKey(
        Order, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    order_number = models.PositiveIntegerField()
    created_at = models.DateTimeField(help_text=_("When the merged-in order was originally created."))
    merged_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"#{self.order_number} into order {self.target_id}"
