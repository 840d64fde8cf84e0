"""
Recipient Database
==================

Async SQLAlchemy access to the ``users`` table.

Implements the RecipientStore protocol: ``add_user`` is idempotent and
``list_all_ids`` feeds the broadcaster.

Usage:
    db = Database("sqlite+aiosqlite:///navbot.sqlite3")
    await db.create_all()
    await db.add_user(42, "alice", "Alice Liddell")
    ids = await db.list_all_ids()
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base, User

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_CONFLICT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class Database:
    """Owns the async engine and session factory."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def add_user(
        self,
        user_id: int,
        user_name: Optional[str] = None,
        full_name: Optional[str] = None
    ) -> bool:
        """
        Insert the user unless already present.

        Safe under concurrent calls for the same id (double /start).
        Returns True if a row was created.
        """
        insert = _CONFLICT_INSERTS.get(self.engine.dialect.name)
        async with self.session_maker() as session:
            if insert is not None:
                statement = (
                    insert(User)
                    .values(user_id=user_id, user_name=user_name, full_name=full_name)
                    .on_conflict_do_nothing(index_elements=[User.user_id])
                )
                result = await session.execute(statement)
                await session.commit()
                created = result.rowcount > 0
            else:
                session.add(User(user_id=user_id, user_name=user_name, full_name=full_name))
                try:
                    await session.commit()
                    created = True
                except IntegrityError:
                    await session.rollback()
                    created = False

        if created:
            logger.info(f"Registered new user {user_id} (@{user_name})")
        return created

    async def get_user(self, user_id: int) -> Optional[User]:
        async with self.session_maker() as session:
            return await session.get(User, user_id)

    async def get_all_users(self) -> Sequence[User]:
        async with self.session_maker() as session:
            result = await session.execute(select(User).order_by(User.user_id))
            return result.scalars().all()

    async def get_all_user_ids(self) -> List[int]:
        async with self.session_maker() as session:
            result = await session.execute(select(User.user_id).order_by(User.user_id))
            return [row[0] for row in result.all()]

    async def list_all_ids(self) -> List[int]:
        return await self.get_all_user_ids()
