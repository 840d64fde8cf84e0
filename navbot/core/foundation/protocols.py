"""
Collaborator Protocols for Navbot

The navigation engine never talks to Telegram or a database directly.
It depends on the three protocols below; the Telegram adapter and the
SQLAlchemy stores implement them, and tests substitute fakes.
"""

from typing import Protocol, Any, Optional, Sequence, runtime_checkable

from .types import ConversationState


@runtime_checkable
class StateStore(Protocol):
    """Per-user conversation state storage.

    Must be strongly consistent per key (read-your-writes). The navigator
    reads the whole state, mutates it and writes it back on every call.
    """

    async def get(self, user_id: int) -> ConversationState:
        """Return the stored state, or an empty state if none exists."""
        ...

    async def set(self, user_id: int, state: ConversationState) -> None:
        """Replace the stored state for ``user_id``."""
        ...


@runtime_checkable
class RecipientStore(Protocol):
    """Known broadcast recipients. Append-only from the engine's view."""

    async def list_all_ids(self) -> Sequence[int]:
        ...

    async def add_user(
        self,
        user_id: int,
        user_name: Optional[str] = None,
        full_name: Optional[str] = None
    ) -> None:
        """Insert the recipient; no-op if already present."""
        ...


@runtime_checkable
class MessagingEndpoint(Protocol):
    """Remote chat transport.

    Implementations raise ``NonEditableError`` from ``edit_message`` when
    the target cannot be edited, and ``TransportError`` for anything else.
    """

    async def edit_message(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        keyboard: Any = None
    ) -> None:
        ...

    async def send_message(self, chat_id: int, text: str, keyboard: Any = None) -> Optional[int]:
        """Send a new message and return its message id."""
        ...

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        ...
