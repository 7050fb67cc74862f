"""Favorites, likes and the playback queue, mirrored to a durable store."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pydantic import ValidationError

from ..models import CanonicalItem
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"
LIKED_KEY = "liked"
QUEUE_KEY = "queue"


class InteractionState:
    """Owns the user's favorites, liked ids, queue and current item.

    Every mutator awaits the write of the key it changed before returning.
    Favorites and liked ids are kept in insertion order. The queue stores full
    item snapshots so entries survive a reload that drops their id from the
    catalog.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._favorites: dict[str, None] = {}
        self._liked: dict[str, None] = {}
        self._queue: list[CanonicalItem] = []
        self._current: CanonicalItem | None = None
        self._write_lock = asyncio.Lock()

    @property
    def favorites(self) -> tuple[str, ...]:
        return tuple(self._favorites)

    @property
    def liked(self) -> tuple[str, ...]:
        return tuple(self._liked)

    @property
    def queue(self) -> tuple[CanonicalItem, ...]:
        return tuple(self._queue)

    @property
    def current(self) -> CanonicalItem | None:
        return self._current

    def is_favorite(self, item_id: str) -> bool:
        return item_id in self._favorites

    def is_liked(self, item_id: str) -> bool:
        return item_id in self._liked

    async def load(self) -> None:
        """Restore state from the store; missing or corrupt keys load empty."""

        self._favorites = dict.fromkeys(await self._read_ids(FAVORITES_KEY))
        self._liked = dict.fromkeys(await self._read_ids(LIKED_KEY))
        self._queue = await self._read_queue()

    async def toggle_favorite(self, item_id: str) -> bool:
        """Flip favorite membership and return the new membership."""

        added = self._toggle(self._favorites, item_id)
        await self._write_ids(FAVORITES_KEY, self._favorites)
        return added

    async def toggle_liked(self, item_id: str) -> bool:
        """Flip liked membership and return the new membership."""

        added = self._toggle(self._liked, item_id)
        await self._write_ids(LIKED_KEY, self._liked)
        return added

    async def toggle_current_favorite(self) -> bool | None:
        if self._current is None:
            return None
        return await self.toggle_favorite(self._current.id)

    async def toggle_current_liked(self) -> bool | None:
        if self._current is None:
            return None
        return await self.toggle_liked(self._current.id)

    async def enqueue(self, item: CanonicalItem) -> bool:
        """Append ``item`` unless an entry with the same id is already queued."""

        if any(entry.id == item.id for entry in self._queue):
            return False
        self._queue.append(item)
        await self._write_queue()
        return True

    async def dequeue_at(self, index: int) -> CanonicalItem | None:
        """Remove the entry at ``index``; out-of-range indices are ignored."""

        if not 0 <= index < len(self._queue):
            return None
        removed = self._queue.pop(index)
        await self._write_queue()
        return removed

    async def reorder(self, from_index: int, to_index: int) -> None:
        """Move the entry at ``from_index`` so it ends up at ``to_index``."""

        size = len(self._queue)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise IndexError(
                f"Queue positions {from_index} -> {to_index} outside 0..{size - 1}"
            )
        entry = self._queue.pop(from_index)
        self._queue.insert(to_index, entry)
        await self._write_queue()

    async def advance(self) -> CanonicalItem | None:
        """Pop the head of the queue and make it the current item."""

        if not self._queue:
            return None
        entry = self._queue.pop(0)
        self._current = entry
        await self._write_queue()
        return entry

    async def play_from_queue(self, index: int) -> CanonicalItem | None:
        """Play the entry at ``index`` immediately, taking it out of the queue."""

        entry = await self.dequeue_at(index)
        if entry is not None:
            self._current = entry
        return entry

    def set_current(self, item: CanonicalItem | None) -> None:
        self._current = item

    @staticmethod
    def _toggle(members: dict[str, None], item_id: str) -> bool:
        if item_id in members:
            del members[item_id]
            return False
        members[item_id] = None
        return True

    # Writes run one at a time and serialize the state at write time, so the
    # last committed value always matches memory.
    async def _write_ids(self, key: str, members: dict[str, None]) -> None:
        async with self._write_lock:
            await self._store.set(key, json.dumps(list(members)))

    async def _write_queue(self) -> None:
        async with self._write_lock:
            snapshots = [entry.to_snapshot() for entry in self._queue]
            await self._store.set(QUEUE_KEY, json.dumps(snapshots))

    async def _read_json(self, key: str) -> Any:
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable %s state", key)
            return None

    async def _read_ids(self, key: str) -> list[str]:
        value = await self._read_json(key)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Discarding %s state of type %s", key, type(value).__name__)
            return []
        return [str(entry) for entry in value if entry is not None]

    async def _read_queue(self) -> list[CanonicalItem]:
        value = await self._read_json(QUEUE_KEY)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Discarding queue state of type %s", type(value).__name__)
            return []

        queue: list[CanonicalItem] = []
        seen: set[str] = set()
        for snapshot in value:
            try:
                entry = CanonicalItem.model_validate(snapshot)
            except ValidationError as exc:
                logger.warning("Skipping invalid queue entry: %s", exc)
                continue
            if entry.id in seen:
                continue
            seen.add(entry.id)
            queue.append(entry)
        return queue
