"""Normalization of scraper payloads into canonical catalog items.

The upstream feed is not under our control: records arrive with any of several
field-naming conventions and the payload itself can take a handful of
top-level shapes. Every canonical attribute is resolved from an ordered table
of ``(field, extractor)`` pairs; the first extractor returning a value other
than ``None`` wins. The field names in these tables are the wire contract with
the scraper and must stay in this order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from .models import CanonicalItem, MediaType
from .utils import is_truthy, coerce_year, first_present, safe_text

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Any]
AliasTable = tuple[tuple[str, Extractor], ...]


def _value(value: Any) -> Any:
    return value


def _date_year(value: Any) -> Any:
    # Only string dates carry a usable ``YYYY`` prefix.
    if isinstance(value, str):
        return value[:4]
    return None


def _aliases(*fields: str) -> AliasTable:
    return tuple((field, _value) for field in fields)


ID_FIELDS = _aliases("id", "tmdb_id", "tmdbId", "imdb_id", "imdbId", "slug", "key")
ID_TITLE_FIELDS = _aliases("title", "name", "primaryTitle")
ID_YEAR_FIELDS: AliasTable = _aliases("year", "release_year", "releaseYear") + (
    ("first_air_date", _date_year),
)
TYPE_FIELDS = ("type", "media_type", "mediaType", "kind")
SEASON_FIELDS = ("number_of_seasons", "seasons")

TITLE_FIELDS = _aliases(
    "title", "name", "primaryTitle", "original_title", "originalTitle"
)
YEAR_FIELDS: AliasTable = _aliases("year", "release_year", "releaseYear") + (
    ("release_date", _date_year),
    ("first_air_date", _date_year),
)
THUMBNAIL_FIELDS = _aliases(
    "thumbnail",
    "poster",
    "posterUrl",
    "poster_url",
    "backdrop",
    "backdropUrl",
    "image",
    "img",
)
VIDEO_FIELDS = _aliases(
    "videoUrl", "video_url", "mp4", "stream", "trailerUrl", "trailer_url"
)
DESCRIPTION_FIELDS = _aliases("description", "overview", "plot", "summary")
COMING_SOON_FIELDS = ("comingSoon", "coming_soon", "upcoming")
STATUS_FIELD = "status"

PAYLOAD_LIST_KEYS = ("items", "all")


def resolve_field(record: Mapping[str, Any], table: AliasTable) -> Any:
    """Return the first non-``None`` extraction from ``table``."""

    for field, extractor in table:
        value = record.get(field)
        if value is None:
            continue
        extracted = extractor(value)
        if extracted is not None:
            return extracted
    return None


def resolve_id(record: Mapping[str, Any]) -> str:
    """Return a stable identifier for ``record``.

    Known identifier fields win in priority order. Records without one get a
    synthesized ``"<title>-<year>"`` id, which can collide across distinct
    records sharing the same title and year.
    """

    identifier = resolve_field(record, ID_FIELDS)
    if identifier is not None:
        return safe_text(identifier)

    title = safe_text(resolve_field(record, ID_TITLE_FIELDS)).strip()
    year = resolve_field(record, ID_YEAR_FIELDS)
    year_text = safe_text(year) if year else ""
    return f"{title or 'unknown'}-{year_text or 'unknown'}"


def resolve_type(record: Mapping[str, Any]) -> MediaType:
    """Classify ``record`` as ``movie`` or ``tv``."""

    kind = safe_text(first_present(record, TYPE_FIELDS)).lower()
    if "tv" in kind or "show" in kind or kind == "series":
        return "tv"
    if "movie" in kind or kind == "film":
        return "movie"
    if first_present(record, SEASON_FIELDS) is not None:
        return "tv"
    return "movie"


def resolve_identity(record: Mapping[str, Any]) -> tuple[str, MediaType]:
    return resolve_id(record), resolve_type(record)


def _resolve_coming_soon(record: Mapping[str, Any]) -> bool:
    if is_truthy(first_present(record, COMING_SOON_FIELDS)):
        return True
    status = record.get(STATUS_FIELD)
    return isinstance(status, str) and "coming" in status.lower()


def normalize_item(record: Mapping[str, Any]) -> CanonicalItem:
    """Map one feed record onto the canonical item shape.

    The result may carry an empty ``id``/``title`` when the record has neither;
    :func:`normalize_payload` drops such items.
    """

    item_id, media_type = resolve_identity(record)
    title = safe_text(resolve_field(record, TITLE_FIELDS)).strip()

    return CanonicalItem(
        id=item_id,
        title=title or item_id,
        type=media_type,
        year=coerce_year(resolve_field(record, YEAR_FIELDS)),
        thumbnail=safe_text(resolve_field(record, THUMBNAIL_FIELDS)),
        video_url=safe_text(resolve_field(record, VIDEO_FIELDS)),
        description=safe_text(resolve_field(record, DESCRIPTION_FIELDS)),
        coming_soon=_resolve_coming_soon(record),
        raw=record,
    )


def extract_records(payload: Any) -> list[Any] | None:
    """Return the record list carried by ``payload``.

    ``None`` means the payload shape is not one the feed is known to produce.
    """

    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return None
    for key in PAYLOAD_LIST_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key]
    movies = payload.get("movies")
    shows = payload.get("tv")
    if isinstance(movies, list) or isinstance(shows, list):
        return [
            *(movies if isinstance(movies, list) else []),
            *(shows if isinstance(shows, list) else []),
        ]
    return None


def normalize_records(records: Iterable[Any]) -> list[CanonicalItem]:
    """Normalize ``records`` keeping the first item seen for every id."""

    items: list[CanonicalItem] = []
    seen: set[str] = set()
    for record in records:
        if not isinstance(record, Mapping):
            logger.debug("Skipping non-object feed record: %r", record)
            continue
        item = normalize_item(record)
        if not item.id or not item.title:
            continue
        if item.id in seen:
            continue
        seen.add(item.id)
        items.append(item)
    return items


def normalize_payload(payload: Any) -> list[CanonicalItem]:
    """Return the canonical items found in an arbitrary payload."""

    records = extract_records(payload)
    if records is None:
        return []
    return normalize_records(records)


def is_supported_payload(payload: Any) -> bool:
    return extract_records(payload) is not None

