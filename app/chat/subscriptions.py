"""
In-process subscriptions to a conversation's message stream.

Used by code that lives next to the channel layer without a WebSocket in
between (workers, bots, tests). WebSocket clients use ChatConsumer instead.

Usage:
    async def on_message(message: dict) -> None:
        print(message["id"], message["content"])

    subscription = await subscribe(conversation.id, on_message)
    ...
    await subscription.unsubscribe()   # or: await subscription()

Delivery:
    - Only messages committed after subscribe() returns are delivered
    - Messages arrive in commit order for the conversation
    - Callers combining a subscription with MessageService.list_for should
      de-duplicate by message id
    - When the transport fails the state becomes "failed"; re-subscribe and
      reconcile the history through list_for
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from typing import TYPE_CHECKING

from channels.layers import get_channel_layer

from chat.constants import REALTIME_CONFIG
from chat.events import MESSAGE_CREATED, conversation_group_name

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import Any

    MessageCallback = Callable[[dict[str, Any]], Awaitable[None] | None]
    StateCallback = Callable[[str], Awaitable[None] | None]

logger = logging.getLogger(__name__)


class Subscription:
    """
    A live subscription to message.created events of one conversation.

    Attributes:
        conversation_id: Conversation being watched
        state: None until started, then "subscribed", "closed" or "failed"
        channel_name: Private channel joined to the conversation group
    """

    def __init__(
        self,
        conversation_id: int,
        on_message: MessageCallback,
        on_state_change: StateCallback | None = None,
        channel_layer=None,
    ):
        self.conversation_id = conversation_id
        self.group_name = conversation_group_name(conversation_id)
        self.on_message = on_message
        self.on_state_change = on_state_change
        self.channel_layer = channel_layer or get_channel_layer()
        self.channel_name: str | None = None
        self.state: str | None = None
        self._reader: asyncio.Task | None = None
        self._closed = False

    def __repr__(self) -> str:
        return f"<Subscription conversation={self.conversation_id} state={self.state}>"

    async def start(self) -> None:
        """Join the conversation group and start reading events."""
        self.channel_name = await self.channel_layer.new_channel()
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        self._reader = asyncio.create_task(self._read())
        await self._set_state(REALTIME_CONFIG.STATE_SUBSCRIBED)

    async def unsubscribe(self) -> None:
        """
        Stop delivery and leave the group.

        Safe to call more than once, before any event arrived, and from
        within on_message.
        """
        if self._closed:
            return
        self._closed = True

        reader = self._reader
        # Unsubscribing from inside on_message runs on the reader task itself.
        if (
            reader is not None
            and not reader.done()
            and reader is not asyncio.current_task()
        ):
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

        if self.channel_name is not None:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

        if self.state != REALTIME_CONFIG.STATE_FAILED:
            await self._set_state(REALTIME_CONFIG.STATE_CLOSED)

        logger.debug(f"Unsubscribed {self.channel_name} from {self.group_name}")

    async def __call__(self) -> None:
        await self.unsubscribe()

    async def _read(self) -> None:
        try:
            while not self._closed:
                event = await self.channel_layer.receive(self.channel_name)
                if self._closed or event.get("type") != MESSAGE_CREATED:
                    continue
                await self._invoke(self.on_message, event["message"])
        except Exception:
            logger.exception(f"Subscription to {self.group_name} failed")
            await self._set_state(REALTIME_CONFIG.STATE_FAILED)

    async def _set_state(self, state: str) -> None:
        self.state = state
        if self.on_state_change is not None:
            await self._invoke(self.on_state_change, state)

    async def _invoke(self, callback, *args) -> None:
        """Run a subscriber callback; its failures never stop the subscription."""
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                f"Subscriber callback {getattr(callback, '__name__', callback)!r} "
                f"failed for {self.group_name}"
            )


async def subscribe(
    conversation_id: int,
    on_message: MessageCallback,
    on_state_change: StateCallback | None = None,
) -> Subscription:
    """
    Subscribe to new messages of a conversation.

    Returns once the subscription is established: every message committed
    from then on is passed to on_message.
    """
    subscription = Subscription(conversation_id, on_message, on_state_change)
    await subscription.start()
    return subscription
