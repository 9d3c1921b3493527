"""
Chat app for marketplace messaging.

This app handles:
- Conversations between a buyer and a seller about a listing
- Message sending and history
- WebSocket real-time updates
- Read receipts and unread counts

Related apps:
    - authentication: User model for participants
    - listings: Listing a conversation is scoped to

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.refs import PendingConversation
    from chat.services import MessageService

    # First message creates the conversation
    result = MessageService.send_lazy(
        sender=buyer,
        ref=PendingConversation(other_participant_id=seller.id, listing_id=listing.id),
        content="Hi, is this still available?",
    )
"""
