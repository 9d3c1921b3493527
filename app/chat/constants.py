"""
Constants and configuration for the chat module.

This module centralizes configuration values for:
- Message operations (content limits, pagination, previews)
- Real-time delivery (channel group naming, WebSocket close codes)

Import example:
    from chat.constants import MESSAGE_CONFIG, REALTIME_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits
    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # History pagination (oldest first)
    PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 100

    # Conversation list preview of the last message
    PREVIEW_LENGTH: Final[int] = 80


# =============================================================================
# Real-time Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Configuration for channel-layer fan-out and WebSocket consumers."""

    # Channel group prefixes
    CONVERSATION_GROUP_PREFIX: Final[str] = "chat"
    USER_GROUP_PREFIX: Final[str] = "user"

    # WebSocket close codes
    CLOSE_UNAUTHENTICATED: Final[int] = 4001
    CLOSE_FORBIDDEN: Final[int] = 4003
    CLOSE_NOT_FOUND: Final[int] = 4004

    # Connection states reported to subscribers
    STATE_SUBSCRIBED: Final[str] = "subscribed"
    STATE_CLOSED: Final[str] = "closed"
    STATE_FAILED: Final[str] = "failed"
