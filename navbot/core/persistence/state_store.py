"""
SQL State Store
===============

StateStore implementation keeping conversation state in the
``conversation_states`` table, so navigation history survives restarts.
"""

import logging

from ..foundation.types import ConversationState
from .database import Database
from .models import ConversationStateRow

logger = logging.getLogger(__name__)


class SqlStateStore:
    """Persists ConversationState rows through a Database."""

    def __init__(self, database: Database):
        self.database = database

    async def get(self, user_id: int) -> ConversationState:
        async with self.database.session_maker() as session:
            row = await session.get(ConversationStateRow, user_id)
            if row is None:
                return ConversationState.empty()
            return ConversationState(
                current_state_id=row.current_state_id,
                history=list(row.history or []),
            )

    async def set(self, user_id: int, state: ConversationState) -> None:
        async with self.database.session_maker() as session:
            row = await session.get(ConversationStateRow, user_id)
            if row is None:
                row = ConversationStateRow(user_id=user_id)
                session.add(row)
            row.current_state_id = state.current_state_id
            row.history = list(state.history)
            await session.commit()

    async def clear(self, user_id: int) -> None:
        async with self.database.session_maker() as session:
            row = await session.get(ConversationStateRow, user_id)
            if row is not None:
                await session.delete(row)
                await session.commit()
                logger.debug(f"Cleared conversation state for {user_id}")
