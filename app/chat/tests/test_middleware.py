"""
Tests for WebSocket JWT authentication.
"""

import pytest
from channels.db import database_sync_to_async
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from authentication.tests.factories import UserFactory
from chat.middleware import (
    JWTAuthMiddleware,
    get_token_from_query,
    get_token_from_subprotocol,
    get_user_from_token,
)


@database_sync_to_async
def _access_token(user):
    return str(AccessToken.for_user(user))


# RefreshToken.for_user writes an OutstandingToken row.
@database_sync_to_async
def _refresh_token(user):
    return str(RefreshToken.for_user(user))


class TestTokenExtraction:
    def test_reads_token_from_query_string(self):
        scope = {"query_string": b"token=abc.def.ghi&other=1"}

        assert get_token_from_query(scope) == "abc.def.ghi"

    def test_query_without_token(self):
        assert get_token_from_query({"query_string": b"other=1"}) is None
        assert get_token_from_query({}) is None

    def test_reads_token_from_subprotocol(self):
        scope = {"subprotocols": ["jwt", "abc.def.ghi"]}

        assert get_token_from_subprotocol(scope) == "abc.def.ghi"

    def test_ignores_other_subprotocols(self):
        assert get_token_from_subprotocol({"subprotocols": ["graphql-ws", "x"]}) is None
        assert get_token_from_subprotocol({"subprotocols": ["jwt"]}) is None


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestGetUserFromToken:
    """
    Verifies:
    - Valid access tokens resolve to the active user
    - Invalid, refresh-type and inactive-user tokens resolve to AnonymousUser
    """

    async def test_valid_token_returns_user(self):
        user = await database_sync_to_async(UserFactory)()

        resolved = await get_user_from_token(await _access_token(user))

        assert resolved.pk == user.pk

    async def test_garbage_token_returns_anonymous(self):
        resolved = await get_user_from_token("not-a-jwt")

        assert resolved.is_authenticated is False

    async def test_refresh_token_is_not_accepted(self):
        user = await database_sync_to_async(UserFactory)()

        resolved = await get_user_from_token(await _refresh_token(user))

        assert resolved.is_authenticated is False

    async def test_inactive_user_returns_anonymous(self):
        user = await database_sync_to_async(UserFactory)(is_active=False)

        resolved = await get_user_from_token(await _access_token(user))

        assert resolved.is_authenticated is False

    async def test_deleted_user_returns_anonymous(self):
        user = await database_sync_to_async(UserFactory)()
        token = await _access_token(user)
        await database_sync_to_async(user.delete)()

        resolved = await get_user_from_token(token)

        assert resolved.is_authenticated is False


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
class TestJWTAuthMiddleware:
    async def test_sets_anonymous_user_without_token(self):
        seen = {}

        async def app(scope, receive, send):
            seen["user"] = scope["user"]

        await JWTAuthMiddleware(app)({"type": "websocket", "query_string": b""}, None, None)

        assert seen["user"].is_authenticated is False

    async def test_sets_user_from_query_token(self):
        user = await database_sync_to_async(UserFactory)()
        token = await _access_token(user)
        seen = {}

        async def app(scope, receive, send):
            seen["user"] = scope["user"]

        scope = {
            "type": "websocket",
            "query_string": f"token={token}".encode(),
        }
        await JWTAuthMiddleware(app)(scope, None, None)

        assert seen["user"].pk == user.pk
        assert "user" not in scope
