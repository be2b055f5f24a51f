from decimal import Decimal
from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantScopedManager


class InventoryItem(models.Model):
    """A raw ingredient or supply tracked in fractional units (kg, litre, piece)."""

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="inventory_items",
    )
    name = models.CharField(max_length=200)
    unit = models.CharField(max_length=20, default="pcs", help_text=_("Unit of measure, e.g. kg or litre."))
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    low_stock_threshold = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("10"),
        help_text=_("Warn when quantity falls to or below this level."),
    )
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["restaurant", "name"], name="unique_inventory_item_per_restaurant"),
        ]

    @property
    def is_low_stock(self):
        return self.quantity <= self.low_stock_threshold

    def __str__(self):
        return f"{self.name} ({self.quantity} {self.unit})"


class RecipeItem(models.Model):
    """One ingredient consumed whenever a unit of a menu item is sold."""

    menu_item = models.ForeignKey(
        "products.MenuItem",
        on_delete=models.CASCADE,
        related_name="recipe_items",
    )
    inventory_item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="used_in",
    )
    quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Quantity of the ingredient used per unit sold."),
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["menu_item", "inventory_item"], name="unique_recipe_ingredient"),
        ]

    def clean(self):
        if self.inventory_item.restaurant_id != self.menu_item.restaurant_id:
            raise ValidationError("Recipe ingredients must belong to the menu item's restaurant.")

    def __str__(self):
        return f"{self.menu_item.name}: {self.quantity} {self.inventory_item.unit} {self.inventory_item.name}"


class StockMovement(models.Model):
    """
    Append-only record of a quantity change applied because of an order.

    quantity_change holds the delta actually applied, which can be smaller than
    the recipe asked for when stock was floored at zero. Restoring an order
    reverses these rows rather than recomputing from the recipe.
    """

    class Operation(models.TextChoices):
        ORDER_DEDUCTION = "ORDER_DEDUCTION", _("Order Deduction")
        ORDER_RESTORATION = "ORDER_RESTORATION", _("Order Restoration")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="stock_movements",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="stock_movements",
    )
    inventory_item = models.ForeignKey(
        InventoryItem,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="movements",
    )
    menu_item = models.ForeignKey(
        "products.MenuItem",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="stock_movements",
        help_text=_("Set when the menu item's own stock changed."),
    )
    operation_type = models.CharField(max_length=20, choices=Operation.choices)
    quantity_change = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        help_text=_("Change in quantity (positive for additions, negative for subtractions)"),
    )
    previous_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    new_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    timestamp = models.DateTimeField(auto_now_add=True)

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["order", "operation_type"], name="stock_move_order_op_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError("Stock movements are append-only.")
        super().save(*args, **kwargs)

    @property
    def target_name(self):
        target = self.inventory_item or self.menu_item
        return target.name if target else ""

    def __str__(self):
        return f"{self.operation_type}: {self.target_name} ({self.quantity_change:+.3f})"
