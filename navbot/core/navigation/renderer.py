"""
Renderer
========

Makes the chat show a screen while keeping a single "live" bot message.

- Button press (callback): edit the bot message in place. If the message
  cannot be edited, send a fresh one to the same chat instead.
- Typed message: send the screen as a new message, then try to delete
  the user's message to keep the chat tidy.

Any transport failure other than a non-editable message becomes a
DeliveryError for the caller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional

from ..foundation.exceptions import TransportError, NonEditableError, DeliveryError
from ..foundation.types import InboundEvent

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Outcome of one render call. Not persisted."""
    delivered: bool
    used_fallback: bool = False
    message_id: Optional[int] = None


async def best_effort(operation: Awaitable[Any], description: str) -> bool:
    """
    Await an optional side effect.

    Transport failures are logged and reported as False; they never reach
    the caller.
    """
    try:
        await operation
        return True
    except TransportError as e:
        logger.debug(f"Best-effort {description} failed: {e}")
        return False


class Renderer:
    """Renders screens through a MessagingEndpoint."""

    def __init__(self, transport):
        self.transport = transport

    async def render(self, event: InboundEvent, text: str, keyboard: Any = None) -> RenderResult:
        if event.is_editable:
            return await self._edit_in_place(event, text, keyboard)
        return await self._send_and_cleanup(event, text, keyboard)

    async def _edit_in_place(self, event: InboundEvent, text: str, keyboard: Any) -> RenderResult:
        try:
            await self.transport.edit_message(event.chat_id, event.message_id, text, keyboard)
            return RenderResult(delivered=True, message_id=event.message_id)
        except NonEditableError as e:
            logger.info(f"Message {event.message_id} in chat {event.chat_id} not editable ({e}), sending new one")
        except TransportError as e:
            raise DeliveryError(f"Failed to edit message: {e}", chat_id=event.chat_id) from e

        message_id = await self._send(event.chat_id, text, keyboard)
        return RenderResult(delivered=True, used_fallback=True, message_id=message_id)

    async def _send_and_cleanup(self, event: InboundEvent, text: str, keyboard: Any) -> RenderResult:
        message_id = await self._send(event.chat_id, text, keyboard)
        if event.message_id is not None:
            await best_effort(
                self.transport.delete_message(event.chat_id, event.message_id),
                f"delete of message {event.message_id}",
            )
        return RenderResult(delivered=True, message_id=message_id)

    async def _send(self, chat_id: int, text: str, keyboard: Any) -> Optional[int]:
        try:
            return await self.transport.send_message(chat_id, text, keyboard)
        except TransportError as e:
            raise DeliveryError(f"Failed to send message: {e}", chat_id=chat_id) from e
