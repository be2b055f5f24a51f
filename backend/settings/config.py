"""
Typed, read-only view of a restaurant's billing configuration.

Services never query BillingSettings directly; they load a BillingConfig
snapshot once per operation so every calculation inside one transaction sees
the same rates.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierThresholds:
    silver: Decimal = Decimal("5000")
    gold: Decimal = Decimal("20000")
    platinum: Decimal = Decimal("50000")


@dataclass(frozen=True)
class BillingConfig:
    tax_rate: Decimal = Decimal("5")
    cgst_rate: Decimal = Decimal("0")
    sgst_rate: Decimal = Decimal("0")
    service_charge_rate: Decimal = Decimal("0")
    currency: str = "INR"
    enable_loyalty: bool = True
    loyalty_points_per_rupee: Decimal = Decimal("1")
    tier_thresholds: TierThresholds = TierThresholds()
    enable_inventory: bool = True

    @property
    def uses_split_gst(self) -> bool:
        return self.cgst_rate > 0 or self.sgst_rate > 0

    @classmethod
    def from_model(cls, settings_obj) -> "BillingConfig":
        return cls(
            tax_rate=settings_obj.tax_rate,
            cgst_rate=settings_obj.cgst_rate,
            sgst_rate=settings_obj.sgst_rate,
            service_charge_rate=settings_obj.service_charge_rate,
            currency=settings_obj.currency,
            enable_loyalty=settings_obj.enable_loyalty,
            loyalty_points_per_rupee=settings_obj.loyalty_points_per_rupee,
            tier_thresholds=TierThresholds(
                silver=settings_obj.silver_tier_threshold,
                gold=settings_obj.gold_tier_threshold,
                platinum=settings_obj.platinum_tier_threshold,
            ),
            enable_inventory=settings_obj.enable_inventory,
        )

    @classmethod
    def for_restaurant(cls, restaurant) -> "BillingConfig":
        """
        Load the configuration for a restaurant, creating the settings row with
        defaults the first time a restaurant bills anything.
        """
        from .models import BillingSettings

        settings_obj, created = BillingSettings.all_objects.get_or_create(restaurant=restaurant)
        if created:
            logger.info(f"Created default BillingSettings for restaurant {restaurant.slug}")
        return cls.from_model(settings_obj)
