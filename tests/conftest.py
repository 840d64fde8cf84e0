"""
Pytest configuration and shared fixtures for navbot tests.

Provides a recording fake of the messaging endpoint, a small screen
registry and conversation fixtures backed by the in-memory state store.
"""
from typing import Any, List, Optional, Set, Tuple

import pytest

from navbot.core.foundation.exceptions import TransportError
from navbot.core.foundation.types import InboundEvent
from navbot.core.navigation.conversation import ConversationManager, InMemoryStateStore
from navbot.core.navigation.navigator import Navigator
from navbot.core.navigation.renderer import Renderer
from navbot.core.navigation.screens import ScreenRegistry

USER_ID = 4242
CALLBACK_MESSAGE_ID = 500
USER_MESSAGE_ID = 77


# =============================================================================
# Fake Transport
# =============================================================================

class FakeTransport:
    """
    Recording MessagingEndpoint.

    Set ``edit_error`` / ``send_error`` / ``delete_error`` to make the
    corresponding call raise, or add chat ids to ``failing_chats`` to make
    sends to them fail.
    """

    def __init__(self):
        self.calls: List[Tuple[str, int, Optional[int], Optional[str], Any]] = []
        self.edit_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.failing_chats: Set[int] = set()
        self._next_message_id = 1000

    async def edit_message(self, chat_id, message_id, text, keyboard=None):
        self.calls.append(("edit", chat_id, message_id, text, keyboard))
        if self.edit_error is not None:
            raise self.edit_error

    async def send_message(self, chat_id, text, keyboard=None):
        self.calls.append(("send", chat_id, None, text, keyboard))
        if self.send_error is not None:
            raise self.send_error
        if chat_id in self.failing_chats:
            raise TransportError(f"Forbidden: chat {chat_id} blocked the bot")
        self._next_message_id += 1
        return self._next_message_id

    async def delete_message(self, chat_id, message_id):
        self.calls.append(("delete", chat_id, message_id, None, None))
        if self.delete_error is not None:
            raise self.delete_error

    def ops(self, name: str) -> list:
        return [call for call in self.calls if call[0] == name]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def registry():
    """Registry with screens 'a', 'b', 'c' and a default screen."""
    registry = ScreenRegistry()
    registry.set_default("Main Menu", lambda: "kb-default")
    for name in ("a", "b", "c"):
        registry.register(name, f"Screen {name.upper()}", lambda name=name: f"kb-{name}")
    return registry


@pytest.fixture
def renderer(transport):
    return Renderer(transport)


@pytest.fixture
def navigator(registry, renderer):
    return Navigator(registry, renderer)


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def conversation(store):
    return ConversationManager(store).get(USER_ID)


@pytest.fixture
def callback_event():
    """Button press on the bot message CALLBACK_MESSAGE_ID."""
    return InboundEvent(
        chat_id=USER_ID,
        user_id=USER_ID,
        message_id=CALLBACK_MESSAGE_ID,
        is_callback=True,
    )


@pytest.fixture
def message_event():
    """Text typed by the user."""
    return InboundEvent(
        chat_id=USER_ID,
        user_id=USER_ID,
        message_id=USER_MESSAGE_ID,
        is_callback=False,
        text="hello",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests touching a real database file")
