from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, max_length=200)),
                ("mobile", models.CharField(blank=True, db_index=True, max_length=20)),
                ("visits", models.PositiveIntegerField(default=0)),
                ("total_spent", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("points", models.PositiveIntegerField(default=0)),
                ("tier", models.CharField(choices=[("bronze", "Bronze"), ("silver", "Silver"), ("gold", "Gold"), ("platinum", "Platinum")], default="bronze", max_length=10)),
                ("last_visit", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="customers", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["-last_visit"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("mobile", ""), _negated=True), fields=("restaurant", "mobile"), name="unique_customer_mobile_per_restaurant"),
                ],
            },
        ),
    ]
