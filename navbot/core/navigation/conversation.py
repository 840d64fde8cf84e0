"""
Conversation Context
====================

Per-user navigation state backed by an external StateStore.

Nothing is cached between calls: every navigation reads the full state
from the store, mutates it and writes it back. That read-modify-write
sequence must not interleave for one user (double taps deliver two
callbacks almost at once), so each Conversation carries a per-user
asyncio lock obtained from a shared KeyedLock.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable, Optional

from ..foundation.types import ConversationState

logger = logging.getLogger(__name__)


class KeyedLock:
    """
    One asyncio.Lock per key, created on demand.

    A key's lock is dropped once nobody holds or waits for it, so the
    table only grows with concurrently active users.
    """

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
            self._users[key] = 0
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class InMemoryStateStore:
    """
    Dict-backed StateStore.

    States are copied on the way in and out so callers never share a
    mutable history list with the store.
    """

    def __init__(self):
        self._states: Dict[int, ConversationState] = {}

    async def get(self, user_id: int) -> ConversationState:
        state = self._states.get(user_id)
        return state.copy() if state is not None else ConversationState.empty()

    async def set(self, user_id: int, state: ConversationState) -> None:
        self._states[user_id] = state.copy()

    async def clear(self, user_id: int) -> None:
        self._states.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._states)


class Conversation:
    """Handle on one user's conversation state."""

    def __init__(self, user_id: int, store, locks: KeyedLock):
        self.user_id = user_id
        self.store = store
        self._locks = locks

    def locked(self):
        """Async context manager serializing work on this conversation."""
        return self._locks.hold(self.user_id)

    async def load(self) -> ConversationState:
        state = await self.store.get(self.user_id)
        return state if state is not None else ConversationState.empty()

    async def save(self, state: ConversationState) -> None:
        await self.store.set(self.user_id, state)
        logger.debug(
            f"Saved conversation {self.user_id}: current={state.current_state_id} "
            f"history={state.history}"
        )

    def __repr__(self) -> str:
        return f"Conversation(user_id={self.user_id})"


class ConversationManager:
    """
    Hands out Conversation handles that share one store and one lock table.

    Usage:
        manager = ConversationManager(InMemoryStateStore())
        conversation = manager.get(update.effective_user.id)
    """

    def __init__(self, store, locks: Optional[KeyedLock] = None):
        self.store = store
        self.locks = locks if locks is not None else KeyedLock()

    def get(self, user_id: int) -> Conversation:
        return Conversation(user_id, self.store, self.locks)
