import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(help_text="Label printed on the table, e.g. T4.", max_length=20)),
                ("capacity", models.PositiveSmallIntegerField(default=4)),
                ("status", models.CharField(choices=[("AVAILABLE", "Available"), ("OCCUPIED", "Occupied"), ("RESERVED", "Reserved")], default="AVAILABLE", max_length=10)),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tables", to="restaurants.restaurant")),
            ],
            options={
                "ordering": ["number"],
            },
        ),
        migrations.CreateModel(
            name="OrderSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("last_number", models.PositiveIntegerField(default=0)),
                ("restaurant", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="order_sequence", to="restaurants.restaurant")),
            ],
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.PositiveIntegerField(editable=False, help_text="Sequential per restaurant; assigned once and never reused.")),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("PREPARING", "Preparing"), ("READY", "Ready"), ("SERVED", "Served"), ("PENDING_PAYMENT", "Pending Payment"), ("CLOSED", "Closed"), ("CANCELLED", "Cancelled")], default="ACTIVE", max_length=20)),
                ("channel", models.CharField(choices=[("DINE_IN", "Dine In"), ("TAKE_AWAY", "Take Away"), ("HOME_DELIVERY", "Home Delivery"), ("SWIGGY", "Swiggy"), ("ZOMATO", "Zomato"), ("OTHER", "Other")], default="DINE_IN", max_length=20)),
                ("customer_name", models.CharField(blank=True, max_length=200)),
                ("customer_mobile", models.CharField(blank=True, db_index=True, max_length=20)),
                ("adults", models.PositiveSmallIntegerField(default=1)),
                ("kids", models.PositiveSmallIntegerField(default=0)),
                ("waiter_name", models.CharField(blank=True, max_length=100)),
                ("discount_amount", models.DecimalField(blank=True, decimal_places=2, help_text="Flat discount. Takes precedence over discount_percent.", max_digits=10, null=True)),
                ("discount_percent", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("apply_tax", models.BooleanField(default=True)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("tax", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("service_charge", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("payment_state", models.CharField(choices=[("NOT_STARTED", "Not Started"), ("PARTIAL", "Partially Paid"), ("SETTLED", "Settled")], default="NOT_STARTED", max_length=20)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount_due", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("payment_method", models.CharField(blank=True, max_length=255)),
                ("inventory_deducted", models.BooleanField(default=False)),
                ("version", models.PositiveIntegerField(default=0)),
                ("cancellation_reason", models.CharField(blank=True, choices=[
                    ("KITCHEN_MISSING_INGREDIENTS", "Kitchen Issue: Missing ingredients"),
                    ("KITCHEN_CHEF_NOT_AVAILABLE", "Kitchen Issue: Chef not available"),
                    ("KITCHEN_EQUIPMENT_MALFUNCTION", "Kitchen Issue: Equipment malfunction"),
                    ("KITCHEN_TOO_COLD", "Kitchen Issue: Too cold"),
                    ("KITCHEN_TASTE_ISSUE", "Kitchen Issue: Issue with taste"),
                    ("KITCHEN_HAIR_IN_DISH", "Kitchen Issue: Hair in dish"),
                    ("KITCHEN_ROTTEN_INGREDIENTS", "Kitchen Issue: Rotten ingredients"),
                    ("OWNER_CANCELLED", "Owner Cancelled"),
                    ("CUSTOMER_DISPUTE", "Customer Dispute"),
                    ("SOLD_OUT", "Sold Out"),
                    ("SCANNED_AND_LEFT", "Scanned and Left"),
                    ("OTHER", "Other"),
                    ("CONSOLIDATED", "Consolidated"),
                ], max_length=40)),
                ("cancellation_note", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("consolidated_into", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="merged_orders", to="orders.order")),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="orders", to="restaurants.restaurant")),
                ("table", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="orders.table")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["restaurant", "status"], name="order_restaurant_status_idx"),
                    models.Index(fields=["restaurant", "customer_mobile", "status"], name="order_mobile_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("restaurant", "order_number"), name="unique_order_number_per_restaurant"),
                ],
            },
        ),
        migrations.AddField(
            model_name="table",
            name="current_order",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="orders.order"),
        ),
        migrations.AddConstraint(
            model_name="table",
            constraint=models.UniqueConstraint(fields=("restaurant", "number"), name="unique_table_number_per_restaurant"),
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("is_custom", models.BooleanField(default=False, help_text="Ad hoc item typed in at the counter, not on the menu.")),
                ("name", models.CharField(max_length=200)),
                ("price", models.DecimalField(decimal_places=2, help_text="Unit price snapshot taken when the item was ordered.", max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("quantity", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("special_request", models.CharField(blank=True, max_length=500)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("PREPARING", "Preparing"), ("READY", "Ready"), ("SERVED", "Served")], default="PENDING", max_length=10)),
                ("added_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("menu_item", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order_items", to="products.menuitem")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
            ],
            options={
                "ordering": ["added_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="OrderItemModifier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("group_name", models.CharField(blank=True, max_length=100)),
                ("option_name", models.CharField(max_length=100)),
                ("price_delta", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("order_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modifiers", to="orders.orderitem")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderAuditEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(choices=[
                    ("ORDER_CREATED", "Order Created"),
                    ("ORDER_UPDATED", "Order Updated"),
                    ("ITEM_STATUS_CHANGED", "Item Status Changed"),
                    ("STATUS_CHANGED", "Status Changed"),
                    ("TABLE_CHANGED", "Table Changed"),
                    ("CUSTOMER_UPDATED", "Customer Updated"),
                    ("ORDER_CLOSED", "Order Closed"),
                    ("ORDER_CANCELLED", "Order Cancelled"),
                    ("ORDER_CONSOLIDATED", "Order Consolidated"),
                    ("PAYMENT_PENDING", "Payment Pending"),
                    ("PARTIAL_PAYMENT", "Partial Payment"),
                    ("PAYMENT_SETTLED", "Payment Settled"),
                ], max_length=30)),
                ("performed_by", models.CharField(blank=True, max_length=100)),
                ("performed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("details", models.CharField(blank=True, max_length=500)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="audit_log", to="orders.order")),
            ],
            options={
                "ordering": ["performed_at", "id"],
                "verbose_name_plural": "Order audit entries",
            },
        ),
        migrations.CreateModel(
            name="ConsolidatedOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_number", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(help_text="When the merged-in order was originally created.")),
                ("merged_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("source", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="orders.order")),
                ("target", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="consolidated_orders", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
