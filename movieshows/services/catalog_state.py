"""Browsable catalog holding the loaded items and the active filter."""

from __future__ import annotations

from typing import Iterable

from ..models import CanonicalItem, FilterKind


class CatalogState:
    """Full item list plus the filtered view derived from filter and search.

    The filtered view is rebuilt from scratch after every mutation; catalogs
    hold hundreds of items, not millions.
    """

    def __init__(self) -> None:
        self._all: tuple[CanonicalItem, ...] = ()
        self._filtered: tuple[CanonicalItem, ...] = ()
        self._filter_kind: FilterKind = "all"
        self._search_text = ""

    @property
    def all(self) -> tuple[CanonicalItem, ...]:
        return self._all

    @property
    def filter_kind(self) -> FilterKind:
        return self._filter_kind

    @property
    def search_text(self) -> str:
        return self._search_text

    def set_all(self, items: Iterable[CanonicalItem]) -> None:
        self._all = tuple(items)
        self._recompute()

    def set_filter(self, kind: FilterKind) -> None:
        self._filter_kind = kind
        self._recompute()

    def set_search(self, text: str) -> None:
        self._search_text = text or ""
        self._recompute()

    def filtered(self) -> tuple[CanonicalItem, ...]:
        return self._filtered

    def find(self, item_id: str) -> CanonicalItem | None:
        for item in self._all:
            if item.id == item_id:
                return item
        return None

    def _matches_kind(self, item: CanonicalItem) -> bool:
        if self._filter_kind == "all":
            return True
        if self._filter_kind == "comingSoon":
            return item.coming_soon
        return item.type == self._filter_kind

    def _recompute(self) -> None:
        needle = self._search_text.lower()
        self._filtered = tuple(
            item
            for item in self._all
            if self._matches_kind(item) and needle in item.title.lower()
        )
