"""Entry point for the FastAPI-powered catalog and player backend."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import AliasChoices, BaseModel, Field, field_validator

from .config import settings
from .database import Database
from .models import CanonicalItem, FilterKind, parse_filter_kind
from .services.catalog_state import CatalogState
from .services.interaction import InteractionState
from .services.library import LibraryService
from .services.source_resolver import SourceResolver
from .storage import DatabaseStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


class FilterRequest(BaseModel):
    kind: FilterKind = Field(validation_alias=AliasChoices("kind", "filter"))

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_filter_kind(value)
        return value


class SearchRequest(BaseModel):
    text: str = Field(default="", validation_alias=AliasChoices("text", "query", "q"))


class ReloadRequest(BaseModel):
    source: str | None = None


class ItemRequest(BaseModel):
    item_id: str = Field(validation_alias=AliasChoices("itemId", "item_id", "id"))


class ReorderRequest(BaseModel):
    from_index: int = Field(validation_alias=AliasChoices("fromIndex", "from_index"))
    to_index: int = Field(validation_alias=AliasChoices("toIndex", "to_index"))


@asynccontextmanager
async def lifespan(_: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.source_timeout_seconds, connect=5.0),
            follow_redirects=True,
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    resolver = SourceResolver(
        http_client,
        injected_payload=settings.injected_content,
        sources=settings.content_sources,
        base_url=(
            str(settings.content_base_url)
            if settings.content_base_url is not None
            else None
        ),
        content_root=settings.content_root,
    )
    library = LibraryService(
        resolver,
        CatalogState(),
        InteractionState(DatabaseStore(database.session_factory)),
    )

    app.state.library = library
    app.state.database = database
    await library.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Catalog browsing, favorites and playback queue for scraped media",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_library(app: FastAPI) -> LibraryService:
    library = getattr(app.state, "library", None)
    if not isinstance(library, LibraryService):
        raise RuntimeError("Library service not initialised")
    return library


def register_routes(fastapi_app: FastAPI) -> None:
    def _require_item(library: LibraryService, item_id: str) -> CanonicalItem:
        item = library.find_item(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"Unknown item {item_id}")
        return item

    def _catalog_payload(library: LibraryService) -> dict[str, Any]:
        catalog = library.catalog
        return {
            "items": [library.item_payload(item) for item in catalog.filtered()],
            "filter": catalog.filter_kind,
            "search": catalog.search_text,
            "total": len(catalog.all),
            "matched": len(catalog.filtered()),
            "loading": library.is_loading,
            "message": library.empty_message(),
        }

    def _queue_payload(library: LibraryService) -> dict[str, Any]:
        queue = library.interaction.queue
        return {
            "items": [
                {"index": index, **library.item_payload(item)}
                for index, item in enumerate(queue)
            ],
            "count": len(queue),
        }

    def _player_payload(library: LibraryService) -> dict[str, Any]:
        current = library.interaction.current
        return {
            "current": library.item_payload(current) if current is not None else None,
            "queueCount": len(library.interaction.queue),
        }

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/catalog")
    async def catalog() -> dict[str, Any]:
        return _catalog_payload(get_library(fastapi_app))

    @fastapi_app.put("/api/catalog/filter")
    async def set_filter(body: FilterRequest) -> dict[str, Any]:
        library = get_library(fastapi_app)
        library.catalog.set_filter(body.kind)
        return _catalog_payload(library)

    @fastapi_app.put("/api/catalog/search")
    async def set_search(body: SearchRequest) -> dict[str, Any]:
        library = get_library(fastapi_app)
        library.catalog.set_search(body.text)
        return _catalog_payload(library)

    @fastapi_app.post("/api/catalog/reload")
    async def reload_catalog(
        source: str | None = None, body: ReloadRequest | None = None
    ) -> dict[str, Any]:
        library = get_library(fastapi_app)
        if body is not None and body.source:
            source = body.source
        started = await library.reload(source)
        return {"reloaded": started, **_catalog_payload(library)}

    @fastapi_app.get("/api/favorites")
    async def favorites() -> dict[str, Any]:
        library = get_library(fastapi_app)
        items = library.favorite_items()
        return {
            "items": [library.item_payload(item) for item in items],
            "count": len(library.interaction.favorites),
        }

    @fastapi_app.post("/api/favorites/{item_id}")
    async def toggle_favorite(item_id: str) -> dict[str, Any]:
        library = get_library(fastapi_app)
        favorite = await library.interaction.toggle_favorite(item_id)
        return {"id": item_id, "favorite": favorite}

    @fastapi_app.post("/api/liked/{item_id}")
    async def toggle_liked(item_id: str) -> dict[str, Any]:
        library = get_library(fastapi_app)
        liked = await library.interaction.toggle_liked(item_id)
        return {"id": item_id, "liked": liked}

    @fastapi_app.get("/api/queue")
    async def queue() -> dict[str, Any]:
        return _queue_payload(get_library(fastapi_app))

    @fastapi_app.post("/api/queue")
    async def enqueue(body: ItemRequest) -> dict[str, Any]:
        library = get_library(fastapi_app)
        item = _require_item(library, body.item_id)
        added = await library.interaction.enqueue(item)
        return {"added": added, **_queue_payload(library)}

    @fastapi_app.post("/api/queue/reorder")
    async def reorder_queue(body: ReorderRequest) -> dict[str, Any]:
        library = get_library(fastapi_app)
        try:
            await library.interaction.reorder(body.from_index, body.to_index)
        except IndexError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _queue_payload(library)

    @fastapi_app.delete("/api/queue/{index}")
    async def dequeue(index: int) -> dict[str, Any]:
        library = get_library(fastapi_app)
        removed = await library.interaction.dequeue_at(index)
        return {"removed": removed is not None, **_queue_payload(library)}

    @fastapi_app.post("/api/queue/{index}/play")
    async def play_from_queue(index: int) -> dict[str, Any]:
        library = get_library(fastapi_app)
        entry = await library.interaction.play_from_queue(index)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No queue entry at {index}")
        return _player_payload(library)

    @fastapi_app.get("/api/player")
    async def player() -> dict[str, Any]:
        return _player_payload(get_library(fastapi_app))

    @fastapi_app.post("/api/player/play")
    async def play(body: ItemRequest) -> dict[str, Any]:
        library = get_library(fastapi_app)
        library.interaction.set_current(_require_item(library, body.item_id))
        return _player_payload(library)

    @fastapi_app.post("/api/player/ended")
    async def playback_ended() -> dict[str, Any]:
        library = get_library(fastapi_app)
        advanced = await library.interaction.advance()
        return {"advanced": advanced is not None, **_player_payload(library)}

    @fastapi_app.post("/api/player/favorite")
    async def toggle_current_favorite() -> dict[str, Any]:
        library = get_library(fastapi_app)
        if await library.interaction.toggle_current_favorite() is None:
            raise HTTPException(status_code=409, detail="Nothing is playing")
        return _player_payload(library)

    @fastapi_app.post("/api/player/like")
    async def toggle_current_liked() -> dict[str, Any]:
        library = get_library(fastapi_app)
        if await library.interaction.toggle_current_liked() is None:
            raise HTTPException(status_code=409, detail="Nothing is playing")
        return _player_payload(library)


app = create_app()

