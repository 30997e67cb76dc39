"""Retrieval and ingestion rules as pure functions.

Deterministic, no I/O, no side-effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from semantic_memory.domain.enums import ALL_CATEGORIES, ItemType


# ---------------------------------------------------------------------------
# Entry ids
# ---------------------------------------------------------------------------


def entry_id(item_type: ItemType | str, suffix: str, index: int | None = None) -> str:
    """Build a stored entry id.

    ``{type}_{suffix}`` for single inserts, ``{type}_{index}_{suffix}`` for
    batch inserts so the positional index is part of the id.
    """
    type_value = item_type.value if isinstance(item_type, ItemType) else str(item_type)
    if index is None:
        return f"{type_value}_{suffix}"
    return f"{type_value}_{index}_{suffix}"


# ---------------------------------------------------------------------------
# Category scoping
# ---------------------------------------------------------------------------


def matches_category(metadata: dict[str, Any], category: str) -> bool:
    """An item matches on either its ``type`` or its source ``platform``.

    Scalar platforms (``42``) compare by their string form.
    """
    if category == ALL_CATEGORIES:
        return True
    if metadata.get("type") == category:
        return True
    platform = metadata.get("platform")
    return platform is not None and str(platform) == category


# ---------------------------------------------------------------------------
# Timestamps and time bands
# ---------------------------------------------------------------------------


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a metadata timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings, ``datetime`` objects and Unix epoch seconds.
    Naive values are taken as UTC. Returns ``None`` for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeBand:
    """Closed time interval ``[start, end]``."""

    start: datetime
    end: datetime

    @classmethod
    def around(cls, anchor: datetime, window_minutes: float) -> TimeBand:
        delta = timedelta(minutes=window_minutes)
        return cls(start=anchor - delta, end=anchor + delta)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def context_query(platform: str | None, timestamp: Any) -> str:
    """Synthesized query used to pull temporally adjacent messages."""
    return f"messages from {platform} around {timestamp}"
