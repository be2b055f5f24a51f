import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Restaurant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(help_text="Display name for the restaurant (e.g., Spice Route)", max_length=255)),
                ("slug", models.SlugField(help_text="Identifier sent by terminals in the X-Restaurant header", unique=True)),
                ("contact_phone", models.CharField(blank=True, max_length=50)),
                ("is_active", models.BooleanField(default=True, help_text="Inactive restaurants cannot access the system")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "restaurants",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["slug"], name="restaurants_slug_idx"),
                    models.Index(fields=["is_active"], name="restaurants_active_idx"),
                ],
            },
        ),
    ]
