"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation browsing
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, Message


class MessageInline(admin.TabularInline):
    """Inline display of messages in conversation admin."""

    model = Message
    extra = 0
    fields = ["sender", "content", "is_read", "read_at", "created_at"]
    readonly_fields = ["sender", "content", "is_read", "read_at", "created_at"]
    ordering = ["created_at", "id"]
    can_delete = False
    show_change_link = True


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "listing",
        "buyer",
        "seller",
        "created_at",
        "last_message_at",
    ]
    list_filter = ["created_at"]
    search_fields = ["id", "listing__title", "buyer__email", "seller__email"]
    readonly_fields = [
        "participant_low",
        "participant_high",
        "created_at",
        "updated_at",
        "last_message_at",
    ]
    raw_id_fields = ["buyer", "seller", "listing"]
    inlines = [MessageInline]
    ordering = ["-created_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "content_preview",
        "is_read",
        "created_at",
    ]
    list_filter = ["is_read", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["conversation", "sender", "content", "created_at", "updated_at"]
    ordering = ["-created_at"]

    @admin.display(description="Content")
    def content_preview(self, obj):
        """Show truncated content preview."""
        if len(obj.content) > 50:
            return obj.content[:50] + "..."
        return obj.content
