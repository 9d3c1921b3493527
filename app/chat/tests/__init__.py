"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Conversation, Message constraints and helpers
- test_services.py: ConversationService and MessageService
- test_subscriptions.py: In-process conversation subscriptions
- test_middleware.py: WebSocket JWT authentication
- test_consumers.py: Conversation and inbox WebSocket consumers
- test_views.py: REST API endpoints and marketplace flows

Usage:
    pytest app/chat/tests/
    pytest app/chat/tests/test_consumers.py
"""
