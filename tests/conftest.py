"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Make ``movieshows`` importable when the tests run without an editable install.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from movieshows.models import CanonicalItem  # noqa: E402
from movieshows.services.interaction import InteractionState  # noqa: E402
from movieshows.storage import MemoryStore  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def make_item(item_id: str, **overrides: object) -> CanonicalItem:
    """Return a canonical item with sensible defaults for tests."""

    data: dict[str, object] = {"id": item_id, "title": f"Title {item_id}"}
    data.update(overrides)
    return CanonicalItem(**data)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def interaction(store: MemoryStore) -> InteractionState:
    return InteractionState(store)
