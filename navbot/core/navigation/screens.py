"""
Screen Registry
===============

Maps a conversation state id to the text and keyboard shown for it.

The registry is built once at startup and injected into the Navigator.
After startup it is only read, so concurrent handlers can share it
without locking.

Usage:
    registry = ScreenRegistry()
    registry.set_default("Main Menu", user_menu_kb)
    registry.register(ScreenId.ADMIN_MENU, "Admin Panel", admin_menu_kb)
    registry.validate()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ..foundation.exceptions import ScreenNotRegisteredError, MissingDefaultScreenError

logger = logging.getLogger(__name__)

KeyboardFactory = Callable[[], Any]
StateKey = Union[str, Enum]

DEFAULT_STATE_ID = "__default__"


def state_key(state_id: StateKey) -> str:
    """Normalize an enum member or plain string into a registry key."""
    if isinstance(state_id, Enum):
        return str(state_id.value)
    return str(state_id)


@dataclass(frozen=True)
class ScreenDescriptor:
    """One registered screen."""
    state_id: str
    text: str
    keyboard_factory: KeyboardFactory

    def build_keyboard(self) -> Any:
        return self.keyboard_factory()


class ScreenRegistry:
    """
    Registry of screens keyed by state id.

    Registering an id twice replaces the earlier descriptor.
    """

    def __init__(self, default: Optional[ScreenDescriptor] = None):
        self._screens: Dict[str, ScreenDescriptor] = {}
        self._default = default

    def register(self, state_id: StateKey, text: str, keyboard_factory: KeyboardFactory) -> None:
        key = state_key(state_id)
        if key in self._screens:
            logger.debug(f"Overwriting screen registration: {key}")
        self._screens[key] = ScreenDescriptor(key, text, keyboard_factory)

    def set_default(self, text: str, keyboard_factory: KeyboardFactory) -> None:
        """Configure the fallback used for unknown or cleared states."""
        self._default = ScreenDescriptor(DEFAULT_STATE_ID, text, keyboard_factory)

    def lookup(self, state_id: Optional[StateKey]) -> Optional[ScreenDescriptor]:
        if state_id is None:
            return None
        return self._screens.get(state_key(state_id))

    def default_screen(self) -> ScreenDescriptor:
        if self._default is None:
            raise MissingDefaultScreenError()
        return self._default

    def resolve(self, state_id: Optional[StateKey]) -> ScreenDescriptor:
        """Return the registered screen, falling back to the default one."""
        screen = self.lookup(state_id)
        if screen is None:
            if state_id is not None:
                logger.debug(f"No screen for state {state_key(state_id)!r}, using default")
            return self.default_screen()
        return screen

    def require(self, state_id: StateKey) -> ScreenDescriptor:
        """Return the registered screen or raise ScreenNotRegisteredError."""
        screen = self.lookup(state_id)
        if screen is None:
            raise ScreenNotRegisteredError(state_key(state_id))
        return screen

    def validate(self) -> None:
        """Boot-time check. Raises MissingDefaultScreenError."""
        self.default_screen()
        logger.info(f"Screen registry ready: {len(self._screens)} screens")

    def state_ids(self) -> List[str]:
        return list(self._screens.keys())

    def __contains__(self, state_id: object) -> bool:
        if not isinstance(state_id, (str, Enum)):
            return False
        return state_key(state_id) in self._screens

    def __len__(self) -> int:
        return len(self._screens)
