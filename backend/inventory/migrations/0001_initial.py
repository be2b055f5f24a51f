from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        ("products", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("unit", models.CharField(default="pcs", help_text="Unit of measure, e.g. kg or litre.", max_length=20)),
                ("quantity", models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("low_stock_threshold", models.DecimalField(decimal_places=3, default=Decimal("10"), help_text="Warn when quantity falls to or below this level.", max_digits=12)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="inventory_items", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(fields=("restaurant", "name"), name="unique_inventory_item_per_restaurant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecipeItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=3, help_text="Quantity of the ingredient used per unit sold.", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("inventory_item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="used_in", to="inventory.inventoryitem")),
                ("menu_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="recipe_items", to="products.menuitem")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("menu_item", "inventory_item"), name="unique_recipe_ingredient"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("operation_type", models.CharField(choices=[("ORDER_DEDUCTION", "Order Deduction"), ("ORDER_RESTORATION", "Order Restoration")], max_length=20)),
                ("quantity_change", models.DecimalField(decimal_places=3, help_text="Change in quantity (positive for additions, negative for subtractions)", max_digits=12)),
                ("previous_quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("new_quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                ("inventory_item", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="movements", to="inventory.inventoryitem")),
                ("menu_item", models.ForeignKey(blank=True, help_text="Set when the menu item's own stock changed.", null=True, on_delete=django.db.models.deletion.CASCADE, related_name="stock_movements", to="products.menuitem")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stock_movements", to="orders.order")),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stock_movements", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [models.Index(fields=["order", "operation_type"], name="stock_move_order_op_idx")],
            },
        ),
    ]
