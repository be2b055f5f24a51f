from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class PartialPayment(models.Model):
    """
    One settlement recorded against an order.

    method is an opaque label ("cash", "upi", "card"); no money moves through
    this system.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="partial_payments",
    )
    method = models.CharField(max_length=50, help_text=_("How the guest paid, e.g. cash or upi."))
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    paid_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["paid_at", "id"]

    def __str__(self):
        return f"{self.method}: {self.amount} on order {self.order_id}"
