"""Domain enumerations for semantic-memory."""

from __future__ import annotations

from enum import Enum


class ItemType(str, Enum):
    """Semantic category of an embedded item.

    Stored verbatim under the ``type`` metadata key and used by
    ``recall`` for category scoping.
    """

    CHAT = "chat"
    CODE = "code"
    CONVERSATION = "conversation"
    DOCUMENT = "document"


# Category value that disables scoping in recall.
ALL_CATEGORIES = "all"

# Substituted for a missing ``type`` when aggregating stats.
UNKNOWN_CATEGORY = "unknown"
