"""
Chat application configuration.

This app provides buyer/seller messaging with:
- One conversation per participant pair and listing, created lazily
- Ordered message history with read receipts
- Real-time fan-out over the Channels layer
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
