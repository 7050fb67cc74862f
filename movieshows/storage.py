"""Durable key-value stores for interaction state."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .db_models import StateEntry


class KeyValueStore(Protocol):
    """Minimal string store; one key is written atomically per ``set``."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store used for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[str] = []

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes.append(key)


class DatabaseStore:
    """Store persisting each key as a row of the ``state_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            stmt = select(StateEntry.value).where(StateEntry.key == key)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        stmt = sqlite_insert(StateEntry).values(key=key, value=value)
        # Single-statement upsert: concurrent first writes of a key cannot collide.
        stmt = stmt.on_conflict_do_update(
            index_elements=[StateEntry.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(stmt)
