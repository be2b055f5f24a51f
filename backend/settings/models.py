from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
from restaurants.managers import RestaurantScopedManager
import logging

logger = logging.getLogger(__name__)


PERCENT_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))]


class BillingSettings(models.Model):
    """
    Restaurant-wide billing, loyalty and inventory rules.

    Rates are stored as percentages (2.5 means 2.5%), matching how they are
    entered on the settings screen. When either CGST or SGST is non-zero the
    flat tax_rate is ignored.
    """

    restaurant = models.OneToOneField(
        'restaurants.Restaurant',
        on_delete=models.CASCADE,
        related_name='billing_settings'
    )

    # === TAX & CHARGES ===
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("5.00"),
        validators=PERCENT_VALIDATORS,
        help_text="Flat tax percentage used when CGST and SGST are both zero."
    )
    cgst_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=PERCENT_VALIDATORS,
        help_text="Central GST percentage."
    )
    sgst_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=PERCENT_VALIDATORS,
        help_text="State GST percentage."
    )
    service_charge_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=PERCENT_VALIDATORS,
        help_text="Service charge percentage applied to the subtotal."
    )
    currency = models.CharField(
        max_length=3,
        default="INR",
        help_text="Three-letter currency code (ISO 4217)."
    )

    # === LOYALTY ===
    enable_loyalty = models.BooleanField(default=True)
    loyalty_points_per_rupee = models.DecimalField(
        max_digits=6,
        decimal_places=3,
        default=Decimal("1.000"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Points earned per unit of currency spent."
    )
    silver_tier_threshold = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("5000.00")
    )
    gold_tier_threshold = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("20000.00")
    )
    platinum_tier_threshold = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("50000.00")
    )

    # === INVENTORY ===
    enable_inventory = models.BooleanField(
        default=True,
        help_text="Deduct recipe ingredients and menu stock when orders close."
    )

    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantScopedManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = "Billing Settings"
        verbose_name_plural = "Billing Settings"

    def clean(self):
        if not (self.silver_tier_threshold <= self.gold_tier_threshold <= self.platinum_tier_threshold):
            raise ValidationError(
                "Tier thresholds must increase from silver to gold to platinum."
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Billing Settings ({self.restaurant.name})"
