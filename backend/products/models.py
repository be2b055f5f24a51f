from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantScopedManager


class MenuItem(models.Model):
    """
    A dish or drink that can be put on an order.

    Orders snapshot name and price at order time, so editing a menu item never
    changes historical bills. stock_quantity is optional: leave it empty for
    items whose availability is driven only by their recipe ingredients.
    """

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="menu_items",
    )
    name = models.CharField(max_length=200, help_text=_("Name shown on the menu and the bill."))
    category = models.CharField(max_length=100, blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("The selling price of the item."),
    )
    stock_quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        null=True,
        blank=True,
        help_text=_("Directly tracked stock. Leave blank if the item is not counted."),
    )
    low_stock_threshold = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=Decimal("10"),
        help_text=_("Warn when tracked stock falls to or below this level."),
    )
    is_available = models.BooleanField(default=True)

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["category", "name"]
        indexes = [
            models.Index(fields=["restaurant", "is_available"], name="menu_item_available_idx"),
        ]

    @property
    def tracks_stock(self):
        return self.stock_quantity is not None

    def __str__(self):
        return self.name
