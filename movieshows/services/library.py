"""High level orchestration of catalog loading and user interaction state."""

from __future__ import annotations

import asyncio
import logging

from ..models import CanonicalItem
from .catalog_state import CatalogState
from .interaction import InteractionState
from .source_resolver import SourceResolver

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = (
    "No content loaded. Place your scraper output as content.json or "
    "data/content.json in the content root, or set MOVIESHOWS_CONTENT."
)
NO_MATCH_MESSAGE = "No content matches your filters."


class LibraryService:
    """Coordinates the source resolver, the catalog and the interaction state."""

    def __init__(
        self,
        resolver: SourceResolver,
        catalog: CatalogState,
        interaction: InteractionState,
    ) -> None:
        self._resolver = resolver
        self.catalog = catalog
        self.interaction = interaction
        self._reload_lock = asyncio.Lock()

    async def start(self) -> None:
        """Restore persisted interaction state and perform the initial load."""

        await self.interaction.load()
        await self.reload()

    async def reload(self, source: str | None = None) -> bool:
        """Reload the catalog; returns ``False`` when a load is already running."""

        if self._reload_lock.locked():
            logger.info("Ignoring reload request while a load is in progress")
            return False
        async with self._reload_lock:
            items = await self._resolver.resolve(source)
            self.catalog.set_all(items)
        logger.info("Catalog holds %d items", len(items))
        return True

    @property
    def is_loading(self) -> bool:
        return self._reload_lock.locked()

    def find_item(self, item_id: str) -> CanonicalItem | None:
        return self.catalog.find(item_id)

    def filtered_items(self) -> tuple[CanonicalItem, ...]:
        return self.catalog.filtered()

    def favorite_items(self) -> list[CanonicalItem]:
        """Favorites resolved against the catalog; orphaned ids are skipped."""

        items: list[CanonicalItem] = []
        for item_id in self.interaction.favorites:
            item = self.catalog.find(item_id)
            if item is not None:
                items.append(item)
        return items

    def empty_message(self) -> str | None:
        if self.catalog.filtered():
            return None
        if not self.catalog.all:
            return NO_CONTENT_MESSAGE
        return NO_MATCH_MESSAGE

    def item_payload(self, item: CanonicalItem) -> dict[str, object]:
        payload = item.to_payload()
        payload["favorite"] = self.interaction.is_favorite(item.id)
        payload["liked"] = self.interaction.is_liked(item.id)
        return payload
