"""
Django admin configuration for listings.
"""

from django.contrib import admin

from listings.models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    """Admin configuration for Listing model."""

    list_display = ("title", "seller", "price", "condition", "is_active", "created_at")
    list_filter = ("is_active", "condition", "created_at")
    search_fields = ("title", "seller__email")
    ordering = ("-created_at",)
    raw_id_fields = ("seller",)
    readonly_fields = ("created_at", "updated_at")
