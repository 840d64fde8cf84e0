"""
Database Models
===============

SQLAlchemy models for known recipients and persisted conversation state.
"""

from typing import List, Optional

from sqlalchemy import BigInteger, JSON, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

USER_NAME_MAX_LENGTH = 32
FULL_NAME_MAX_LENGTH = 128
STATE_ID_MAX_LENGTH = 64


class Base(DeclarativeBase):
    pass


class User(Base):
    """A chat user who pressed /start. Broadcast recipients come from here."""
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(USER_NAME_MAX_LENGTH))
    full_name: Mapped[Optional[str]] = mapped_column(String(FULL_NAME_MAX_LENGTH))

    def __repr__(self) -> str:
        return f"User(user_id={self.user_id}, user_name={self.user_name!r})"


class ConversationStateRow(Base):
    """Navigation state of one conversation (see ConversationState)."""
    __tablename__ = "conversation_states"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    current_state_id: Mapped[Optional[str]] = mapped_column(String(STATE_ID_MAX_LENGTH))
    history: Mapped[List[str]] = mapped_column(JSON, default=list)
