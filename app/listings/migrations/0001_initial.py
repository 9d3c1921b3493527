"""
Initial listings schema.

Changes:
    - Create Listing with seller/is_active index
"""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "title",
                    models.CharField(help_text="Short item title", max_length=200),
                ),
                (
                    "description",
                    models.TextField(blank=True, help_text="Item description"),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2, help_text="Asking price", max_digits=10
                    ),
                ),
                (
                    "original_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Price when new",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "condition",
                    models.CharField(
                        choices=[
                            ("new", "New"),
                            ("like_new", "Like new"),
                            ("good", "Good"),
                            ("fair", "Fair"),
                        ],
                        default="good",
                        help_text="Item condition",
                        max_length=20,
                    ),
                ),
                (
                    "location",
                    models.CharField(
                        blank=True, help_text="Pickup location", max_length=255
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Whether the listing still accepts new conversations",
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        help_text="User who listed the item",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="listings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "listing",
                "verbose_name_plural": "listings",
                "db_table": "listings_listing",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["seller", "is_active"],
                        name="listing_seller_active_idx",
                    )
                ],
            },
        ),
    ]
