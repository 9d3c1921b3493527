"""
Listing model.

A listing is a second-hand item offered by a seller. Conversations are
always scoped to exactly one listing, and the listing's seller decides the
buyer/seller roles when a conversation is created lazily.

Related files:
    - chat/models.py: Conversation.listing
    - chat/services.py: ConversationService uses seller and is_active
"""

from django.conf import settings
from django.db import models

from core.models import BaseModel


class Listing(BaseModel):
    """
    An item offered for sale.

    Fields:
        seller: User who listed the item
        title: Short item title shown in chat headers
        description: Free-form description
        price: Asking price
        original_price: Price when new (optional)
        condition: Item condition
        location: Pickup location text
        is_active: False once sold or withdrawn; no new conversations then
    """

    class Condition(models.TextChoices):
        NEW = "new", "New"
        LIKE_NEW = "like_new", "Like new"
        GOOD = "good", "Good"
        FAIR = "fair", "Fair"

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
        help_text="User who listed the item",
    )
    title = models.CharField(
        max_length=200,
        help_text="Short item title",
    )
    description = models.TextField(
        blank=True,
        help_text="Item description",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Asking price",
    )
    original_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Price when new",
    )
    condition = models.CharField(
        max_length=20,
        choices=Condition.choices,
        default=Condition.GOOD,
        help_text="Item condition",
    )
    location = models.CharField(
        max_length=255,
        blank=True,
        help_text="Pickup location",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether the listing still accepts new conversations",
    )

    class Meta:
        db_table = "listings_listing"
        ordering = ["-created_at"]
        verbose_name = "listing"
        verbose_name_plural = "listings"
        indexes = [
            models.Index(
                fields=["seller", "is_active"],
                name="listing_seller_active_idx",
            ),
        ]

    def __str__(self):
        return self.title
