from decimal import Decimal, ROUND_FLOOR
from django.db import transaction
from django.utils import timezone
import logging

from .models import Customer

logger = logging.getLogger(__name__)


class LoyaltyService:
    """Visits, spend, points and tier for returning guests."""

    @staticmethod
    def tier_for_spend(total_spent, thresholds) -> str:
        """Tier is a pure function of cumulative spend."""
        if total_spent >= thresholds.platinum:
            return Customer.Tier.PLATINUM
        if total_spent >= thresholds.gold:
            return Customer.Tier.GOLD
        if total_spent >= thresholds.silver:
            return Customer.Tier.SILVER
        return Customer.Tier.BRONZE

    @staticmethod
    def points_for(amount_spent, points_per_rupee) -> int:
        return int((Decimal(amount_spent) * Decimal(points_per_rupee)).to_integral_value(rounding=ROUND_FLOOR))

    @staticmethod
    def find_customer(restaurant, customer_name="", customer_mobile="", for_update=False):
        """Look a guest up by mobile, or by name when no mobile was given."""
        customer_name = (customer_name or "").strip()
        customer_mobile = (customer_mobile or "").strip()

        queryset = Customer.all_objects.filter(restaurant=restaurant)
        if for_update:
            queryset = queryset.select_for_update()
        if customer_mobile:
            return queryset.filter(mobile=customer_mobile).first()
        if customer_name:
            return queryset.filter(mobile="", name__iexact=customer_name).first()
        return None

    @staticmethod
    @transaction.atomic
    def update(restaurant, customer_name, customer_mobile, amount_spent, config):
        """
        Record a completed visit.

        Skipped when loyalty is switched off or the guest left neither a
        mobile nor a name.

        Returns:
            The updated Customer, or None when skipped
        """
        customer_name = (customer_name or "").strip()
        customer_mobile = (customer_mobile or "").strip()

        if not config.enable_loyalty:
            return None
        if not customer_mobile and not customer_name:
            return None

        customer = LoyaltyService.find_customer(
            restaurant, customer_name, customer_mobile, for_update=True
        )
        if customer is None:
            customer = Customer.all_objects.create(
                restaurant=restaurant, name=customer_name, mobile=customer_mobile
            )
            logger.info(f"Created loyalty record for {customer.display_name}")
        elif customer_name and not customer.name:
            customer.name = customer_name

        customer.visits += 1
        customer.total_spent += Decimal(amount_spent)
        customer.last_visit = timezone.now()
        customer.points += LoyaltyService.points_for(amount_spent, config.loyalty_points_per_rupee)
        customer.tier = LoyaltyService.tier_for_spend(customer.total_spent, config.tier_thresholds)
        customer.save()

        logger.info(
            f"Loyalty update for {customer.display_name}: visits={customer.visits} points={customer.points} tier={customer.tier}"
        )
        return customer
