"""Tests for semantic_memory.domain.rules: pure function tests."""

from datetime import datetime, timedelta, timezone

import pytest

from semantic_memory.domain.enums import ItemType
from semantic_memory.domain.rules import (
    TimeBand,
    context_query,
    entry_id,
    matches_category,
    parse_timestamp,
)


# ---------------------------------------------------------------------------
# entry_id()
# ---------------------------------------------------------------------------


class TestEntryId:
    def test_single_insert_format(self):
        assert entry_id(ItemType.CHAT, "abc") == "chat_abc"

    def test_batch_insert_includes_index(self):
        assert entry_id(ItemType.CODE, "abc", index=3) == "code_3_abc"

    def test_index_zero_is_kept(self):
        assert entry_id(ItemType.DOCUMENT, "s", index=0) == "document_0_s"

    def test_plain_string_type(self):
        assert entry_id("conversation", "x") == "conversation_x"


# ---------------------------------------------------------------------------
# matches_category()
# ---------------------------------------------------------------------------


class TestMatchesCategory:
    def test_all_matches_everything(self):
        assert matches_category({}, "all")
        assert matches_category({"type": "code"}, "all")

    def test_matches_on_type(self):
        assert matches_category({"type": "code", "platform": "github"}, "code")

    def test_matches_on_platform(self):
        assert matches_category({"type": "chat", "platform": "discord"}, "discord")

    def test_no_match(self):
        assert not matches_category({"type": "chat", "platform": "discord"}, "code")

    def test_missing_keys_never_match(self):
        assert not matches_category({}, "chat")

    def test_numeric_platform_matches_its_text(self):
        assert matches_category({"type": "chat", "platform": 42}, "42")
        assert not matches_category({"type": "chat", "platform": 42}, "4")

    def test_missing_platform_never_matches_none_text(self):
        assert not matches_category({"type": "chat"}, "None")


# ---------------------------------------------------------------------------
# parse_timestamp()
# ---------------------------------------------------------------------------


class TestParseTimestamp:
    def test_iso_with_z_suffix(self):
        parsed = parse_timestamp("2024-05-01T10:00:00Z")
        assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_iso_with_offset_is_normalised_to_utc(self):
        parsed = parse_timestamp("2024-05-01T12:00:00+02:00")
        assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_naive_iso_is_utc(self):
        parsed = parse_timestamp("2024-05-01T10:00:00")
        assert parsed.tzinfo == timezone.utc

    def test_datetime_passthrough(self):
        dt = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert parse_timestamp(dt) == dt

    def test_epoch_seconds(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(60.0) == datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", True, [], {}])
    def test_unparseable_returns_none(self, value):
        assert parse_timestamp(value) is None


# ---------------------------------------------------------------------------
# TimeBand
# ---------------------------------------------------------------------------


class TestTimeBand:
    ANCHOR = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_band_is_symmetric(self):
        band = TimeBand.around(self.ANCHOR, 3)
        assert band.start == self.ANCHOR - timedelta(minutes=3)
        assert band.end == self.ANCHOR + timedelta(minutes=3)

    def test_bounds_are_inclusive(self):
        band = TimeBand.around(self.ANCHOR, 3)
        assert band.contains(band.start)
        assert band.contains(band.end)
        assert band.contains(self.ANCHOR)

    def test_outside(self):
        band = TimeBand.around(self.ANCHOR, 3)
        assert not band.contains(self.ANCHOR + timedelta(minutes=3, seconds=1))
        assert not band.contains(self.ANCHOR - timedelta(minutes=4))


def test_context_query_text():
    assert context_query("slack", "2024-05-01T10:00:00Z") == (
        "messages from slack around 2024-05-01T10:00:00Z"
    )
