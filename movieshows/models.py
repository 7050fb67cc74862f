"""Pydantic models describing normalized catalog entries."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MediaType = Literal["movie", "tv"]
FilterKind = Literal["all", "movie", "tv", "comingSoon"]

FILTER_KIND_ALIASES: dict[str, FilterKind] = {
    "all": "all",
    "movie": "movie",
    "movies": "movie",
    "film": "movie",
    "tv": "tv",
    "series": "tv",
    "shows": "tv",
    "comingsoon": "comingSoon",
    "coming-soon": "comingSoon",
    "coming_soon": "comingSoon",
}


def parse_filter_kind(value: str) -> FilterKind:
    """Map a filter name (including the legacy button values) to a filter kind."""

    kind = FILTER_KIND_ALIASES.get(str(value or "").strip().lower())
    if kind is None:
        raise ValueError(f"Unknown filter kind: {value!r}")
    return kind


class CanonicalItem(BaseModel):
    """A single media entry after normalization of a feed record."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    type: MediaType = "movie"
    year: int | None = None
    thumbnail: str = ""
    video_url: str = Field(default="", alias="videoUrl")
    description: str = ""
    coming_soon: bool = Field(default=False, alias="comingSoon")
    raw: Any = Field(default=None, repr=False)

    @property
    def playable(self) -> bool:
        return bool(self.video_url)

    def display_meta(self) -> str:
        """Return the short subtitle shown under the title on cards."""

        parts: list[str] = []
        if self.year:
            parts.append(str(self.year))
        parts.append("TV Show" if self.type == "tv" else "Movie")
        if self.coming_soon:
            parts.append("Coming Soon")
        return " • ".join(parts)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON payload consumed by the player UI."""

        payload = self.model_dump(mode="json", by_alias=True, exclude={"raw"})
        payload["meta"] = self.display_meta()
        return payload

    def to_snapshot(self) -> dict[str, Any]:
        """Return the durable form of the item, raw record included."""

        return self.model_dump(mode="json", by_alias=True)
