import uuid
from django.db import models


class Restaurant(models.Model):
    """
    Root entity for data isolation.
    Every order, table, menu item, inventory item and customer belongs to
    exactly one restaurant and is never visible to another.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        help_text="Display name for the restaurant (e.g., Spice Route)"
    )
    slug = models.SlugField(
        unique=True,
        help_text="Identifier sent by terminals in the X-Restaurant header"
    )
    contact_phone = models.CharField(max_length=50, blank=True)

    is_active = models.BooleanField(
        default=True,
        help_text="Inactive restaurants cannot access the system"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'restaurants'
        ordering = ['name']
        indexes = [
            models.Index(fields=["slug"], name="restaurants_slug_idx"),
            models.Index(fields=["is_active"], name="restaurants_active_idx"),
        ]

    def __str__(self):
        return self.name
