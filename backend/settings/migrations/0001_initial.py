from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

PERCENT = [
    django.core.validators.MinValueValidator(Decimal("0")),
    django.core.validators.MaxValueValidator(Decimal("100")),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="BillingSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tax_rate", models.DecimalField(decimal_places=2, default=Decimal("5.00"), help_text="Flat tax percentage used when CGST and SGST are both zero.", max_digits=5, validators=PERCENT)),
                ("cgst_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Central GST percentage.", max_digits=5, validators=PERCENT)),
                ("sgst_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="State GST percentage.", max_digits=5, validators=PERCENT)),
                ("service_charge_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Service charge percentage applied to the subtotal.", max_digits=5, validators=PERCENT)),
                ("currency", models.CharField(default="INR", help_text="Three-letter currency code (ISO 4217).", max_length=3)),
                ("enable_loyalty", models.BooleanField(default=True)),
                ("loyalty_points_per_rupee", models.DecimalField(decimal_places=3, default=Decimal("1.000"), help_text="Points earned per unit of currency spent.", max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("silver_tier_threshold", models.DecimalField(decimal_places=2, default=Decimal("5000.00"), max_digits=12)),
                ("gold_tier_threshold", models.DecimalField(decimal_places=2, default=Decimal("20000.00"), max_digits=12)),
                ("platinum_tier_threshold", models.DecimalField(decimal_places=2, default=Decimal("50000.00"), max_digits=12)),
                ("enable_inventory", models.BooleanField(default=True, help_text="Deduct recipe ingredients and menu stock when orders close.")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("restaurant", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="billing_settings", to="restaurants.restaurant")),
            ],
            options={
                "verbose_name": "Billing Settings",
                "verbose_name_plural": "Billing Settings",
            },
        ),
    ]
