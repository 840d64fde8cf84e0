"""
Telegram Transport
==================

MessagingEndpoint implementation over python-telegram-bot, plus the
conversion of Telegram updates into transport-neutral InboundEvents.

Telegram reports every edit problem as a BadRequest; the description
tells whether the message simply cannot be edited (the renderer then
sends a new one) or something else went wrong.
"""

import logging
from typing import Any, Optional

from telegram import Bot, Update
from telegram.error import BadRequest, TelegramError

from ..core.foundation.exceptions import TransportError, NonEditableError
from ..core.foundation.types import InboundEvent

logger = logging.getLogger(__name__)

NON_EDITABLE_MARKERS = (
    "message is not modified",
    "message can't be edited",
    "message to edit not found",
    "there is no text in the message to edit",
)


def is_non_editable(error: Exception) -> bool:
    """True if a BadRequest means the target message cannot be edited."""
    description = str(error).lower()
    return any(marker in description for marker in NON_EDITABLE_MARKERS)


class TelegramTransport:
    """Sends, edits and deletes messages through a telegram.Bot."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def edit_message(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        keyboard: Any = None
    ) -> None:
        try:
            await self.bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                reply_markup=keyboard,
            )
        except BadRequest as e:
            if is_non_editable(e):
                raise NonEditableError(str(e)) from e
            raise TransportError(str(e)) from e
        except TelegramError as e:
            raise TransportError(str(e)) from e

    async def send_message(self, chat_id: int, text: str, keyboard: Any = None) -> Optional[int]:
        try:
            message = await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=keyboard)
        except TelegramError as e:
            raise TransportError(str(e)) from e
        return message.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as e:
            raise TransportError(str(e)) from e


def event_from_update(update: Update) -> InboundEvent:
    """Describe a Telegram update as an InboundEvent."""
    user = update.effective_user
    chat = update.effective_chat
    user_id = user.id if user else chat.id
    user_name = user.username if user else None
    full_name = user.full_name if user else None

    query = update.callback_query
    if query is not None and query.message is not None:
        return InboundEvent(
            chat_id=chat.id,
            user_id=user_id,
            message_id=query.message.message_id,
            is_callback=True,
            text=query.data,
            user_name=user_name,
            full_name=full_name,
        )

    message = update.effective_message
    return InboundEvent(
        chat_id=chat.id,
        user_id=user_id,
        message_id=message.message_id if message else None,
        is_callback=False,
        text=message.text if message else None,
        user_name=user_name,
        full_name=full_name,
    )
