"""
Core Data Types
===============

Data structures shared by the navigation engine, the stores and the
Telegram adapter.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


@dataclass
class ConversationState:
    """
    Navigation state of one user conversation.

    ``history`` is a stack of previously shown state ids. It never holds
    two consecutive equal entries.
    """
    current_state_id: Optional[str] = None
    history: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ConversationState":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.current_state_id is None and not self.history

    def push(self, state_id: Optional[str]) -> bool:
        """
        Push ``state_id`` onto the history stack.

        Skipped for empty ids and when the stack top already equals it.

        Returns:
            True if the stack grew
        """
        if not state_id:
            return False
        if self.history and self.history[-1] == state_id:
            return False
        self.history.append(state_id)
        return True

    def pop(self) -> Optional[str]:
        """Pop the stack top, or return None when history is empty."""
        if not self.history:
            return None
        return self.history.pop()

    def clear(self) -> None:
        self.current_state_id = None
        self.history = []

    def copy(self) -> "ConversationState":
        return ConversationState(
            current_state_id=self.current_state_id,
            history=list(self.history),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_state_id": self.current_state_id,
            "history": list(self.history),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ConversationState":
        if not data:
            return cls.empty()
        return cls(
            current_state_id=data.get("current_state_id"),
            history=list(data.get("history") or []),
        )


@dataclass
class InboundEvent:
    """
    Incoming update from the chat, independent of the transport library.

    ``is_callback`` is True when the update came from a pressed inline
    button; ``message_id`` then points at the bot message carrying that
    button and can be edited in place. Otherwise it is the user's own
    message.
    """
    chat_id: int
    user_id: int
    message_id: Optional[int] = None
    is_callback: bool = False
    text: Optional[str] = None
    user_name: Optional[str] = None
    full_name: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_editable(self) -> bool:
        return self.is_callback and self.message_id is not None
