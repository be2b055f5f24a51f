from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(help_text="Name shown on the menu and the bill.", max_length=200)),
                ("category", models.CharField(blank=True, max_length=100)),
                ("price", models.DecimalField(decimal_places=2, help_text="The selling price of the item.", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("stock_quantity", models.DecimalField(blank=True, decimal_places=3, help_text="Directly tracked stock. Leave blank if the item is not counted.", max_digits=10, null=True)),
                ("low_stock_threshold", models.DecimalField(decimal_places=3, default=Decimal("10"), help_text="Warn when tracked stock falls to or below this level.", max_digits=10)),
                ("is_available", models.BooleanField(default=True)),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="menu_items", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["category", "name"],
                "indexes": [models.Index(fields=["restaurant", "is_available"], name="menu_item_available_idx")],
            },
        ),
    ]
