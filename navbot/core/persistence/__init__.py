"""
Persistence: recipient database and SQL-backed conversation state.
"""

from .models import Base, User, ConversationStateRow
from .database import Database
from .state_store import SqlStateStore

__all__ = [
    "Base",
    "User",
    "ConversationStateRow",
    "Database",
    "SqlStateStore",
]
