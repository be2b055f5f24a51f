from decimal import Decimal
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from restaurants.managers import RestaurantScopedManager


class Customer(models.Model):
    """
    Loyalty record for a returning guest.

    Guests are identified by mobile number; a guest who never gave one is
    tracked by name instead.
    """

    class Tier(models.TextChoices):
        BRONZE = "bronze", _("Bronze")
        SILVER = "silver", _("Silver")
        GOLD = "gold", _("Gold")
        PLATINUM = "platinum", _("Platinum")

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="customers",
    )
    name = models.CharField(max_length=200, blank=True)
    mobile = models.CharField(max_length=20, blank=True, db_index=True)

    visits = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    points = models.PositiveIntegerField(default=0)
    tier = models.CharField(max_length=10, choices=Tier.choices, default=Tier.BRONZE)
    last_visit = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-last_visit"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "mobile"],
                condition=~Q(mobile=""),
                name="unique_customer_mobile_per_restaurant",
            ),
        ]

    @property
    def display_name(self):
        return self.name or self.mobile

    def __str__(self):
        return f"{self.display_name} ({self.get_tier_display()})"
