"""Utility helpers for probing loosely-structured feed records."""

from __future__ import annotations

import math
from typing import Any, Mapping, Sequence


def first_present(record: Mapping[str, Any], fields: Sequence[str]) -> Any:
    """Return the first value stored under ``fields`` that is not ``None``."""

    for field in fields:
        value = record.get(field)
        if value is not None:
            return value
    return None


def safe_text(value: Any) -> str:
    """Render an arbitrary feed value as text, mapping ``None`` to ``""``."""

    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_truthy(value: Any) -> bool:
    """Truthiness as the feed's JavaScript producers see it.

    Any non-empty string counts, including ``"false"``; lists and objects
    count even when empty; ``NaN`` does not.
    """

    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    return True


def coerce_year(value: Any) -> int | None:
    """Return ``value`` as an integer year, or ``None`` when it is not one."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)
