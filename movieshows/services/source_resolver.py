"""Discovery of the scraper payload across an ordered list of candidates."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Sequence
from urllib.parse import urljoin

import httpx

from ..config import CONTENT_SOURCES
from ..models import CanonicalItem
from ..normalization import is_supported_payload, normalize_payload

logger = logging.getLogger(__name__)


class SourceLoadError(Exception):
    """Raised when a single candidate location cannot produce a payload."""


class SourceResolver:
    """Loads the catalog payload from the first candidate that yields items.

    Candidates are tried strictly one after another: an injected payload, an
    explicit override location, then the conventional locations. A failing
    candidate is logged and skipped; running out of candidates yields an empty
    catalog rather than an error.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        injected_payload: Any = None,
        sources: Sequence[str] = CONTENT_SOURCES,
        base_url: str | None = None,
        content_root: str | Path | None = None,
    ) -> None:
        self._client = http_client
        self._injected_payload = injected_payload
        self._sources = tuple(sources)
        self._base_url = self._normalize_base_url(base_url)
        self._content_root = Path(content_root) if content_root is not None else None

    async def resolve(self, override: str | None = None) -> list[CanonicalItem]:
        """Return the normalized items of the first usable candidate."""

        if self._injected_payload is not None:
            if is_supported_payload(self._injected_payload):
                items = normalize_payload(self._injected_payload)
                logger.info("Loaded %d items from the injected payload", len(items))
                return items
            logger.warning("Ignoring injected payload with an unsupported shape")

        override = (override or "").strip()
        if override:
            try:
                payload = await self.load(override)
            except SourceLoadError as exc:
                logger.warning("Source override %s failed: %s", override, exc)
            else:
                items = normalize_payload(payload)
                logger.info("Loaded %d items from %s", len(items), override)
                return items

        for location in self._sources:
            try:
                payload = await self.load(location)
            except SourceLoadError as exc:
                logger.warning("Content source %s failed: %s", location, exc)
                continue
            items = normalize_payload(payload)
            if items:
                logger.info("Loaded %d items from %s", len(items), location)
                return items
            logger.info("Content source %s produced no items", location)

        logger.info("No content source produced any items")
        return []

    async def load(self, location: str) -> Any:
        """Fetch and decode the JSON payload stored at ``location``."""

        url = self._resolve_url(location)
        if url is not None:
            return await self._fetch_json(url)
        return await self._read_json(location)

    def _resolve_url(self, location: str) -> str | None:
        lowered = location.lower()
        if lowered.startswith(("http://", "https://")):
            return location
        if self._base_url:
            return urljoin(self._base_url, location)
        return None

    async def _fetch_json(self, url: str) -> Any:
        try:
            response = await self._client.get(url, headers={"Cache-Control": "no-store"})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceLoadError(str(exc)) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise SourceLoadError(f"Invalid JSON returned by {url}") from exc

    async def _read_json(self, location: str) -> Any:
        path = self._local_path(location)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            raise SourceLoadError(str(exc)) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceLoadError(f"Invalid JSON in {path}") from exc

    def _local_path(self, location: str) -> Path:
        """Resolve ``location`` to a file that must lie inside the content root."""

        root = (self._content_root or Path(".")).resolve()
        try:
            path = (root / location).resolve()
        except (OSError, ValueError) as exc:
            raise SourceLoadError(str(exc)) from exc
        if not path.is_relative_to(root):
            raise SourceLoadError(f"{location} is outside the content root")
        return path

    @staticmethod
    def _normalize_base_url(value: str | None) -> str | None:
        if not value:
            return None
        normalized = str(value).strip()
        if not normalized:
            return None
        # ``urljoin`` drops the last path segment unless it ends with a slash.
        if not normalized.endswith("/"):
            normalized = f"{normalized}/"
        return normalized
