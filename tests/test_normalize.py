"""Tests for trendwatch.ingestion.normalize — item model and text cleaning."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from trendwatch.ingestion.normalize import (
    Item,
    ItemKind,
    build_item,
    clean_text,
    is_absolute_url,
    normalize_items,
    parse_timestamp,
    resolve_url,
)


def _item(title, source="Test Source", kind=ItemKind.FEED_POST):
    return Item(kind=kind, source=source, title=title, url="https://example.com/a")


# --- URL resolution ---


class TestResolveUrl:
    def test_prefers_primary(self):
        assert resolve_url("https://a.com/1", "https://b.com/2") == "https://a.com/1"

    def test_falls_back_to_absolute_alternate(self):
        assert resolve_url(None, "https://b.com/2") == "https://b.com/2"

    def test_malformed_primary_uses_alternate(self):
        assert resolve_url("/relative/path", "https://b.com/2") == "https://b.com/2"

    def test_non_url_alternate_rejected(self):
        assert resolve_url(None, "tag:example.com,2025:123") is None

    def test_both_missing(self):
        assert resolve_url(None, None) is None

    def test_strips_whitespace(self):
        assert resolve_url("  https://a.com/1 \n") == "https://a.com/1"

    @pytest.mark.parametrize("value", ["", "example.com", "ftp://a.com/x", "https://", None])
    def test_not_absolute(self, value):
        assert not is_absolute_url(value)


# --- Timestamps ---


class TestParseTimestamp:
    def test_iso_with_z(self):
        dt = parse_timestamp("2025-06-15T10:00:00Z")
        assert dt == datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)

    def test_rfc2822(self):
        dt = parse_timestamp("Sun, 15 Jun 2025 10:00:00 GMT")
        assert dt == datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)

    def test_epoch_seconds(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_naive_datetime_assumed_utc(self):
        dt = parse_timestamp(datetime(2025, 6, 15, 10, 0))
        assert dt.tzinfo is not None
        assert dt == datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        dt = parse_timestamp("2025-06-15T12:00:00+02:00")
        assert dt == datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)

    def test_garbage_returns_none(self):
        assert parse_timestamp("not a date") is None

    def test_missing_returns_none(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None


# --- Cleaning ---


class TestCleanText:
    def test_collapses_whitespace(self):
        assert clean_text("  Artist   X\n\tDrops  Album ") == "Artist X Drops Album"

    def test_decodes_entities(self):
        assert clean_text("Tom &amp; Jerry &quot;Live&quot; &#39;25") == "Tom & Jerry \"Live\" '25"

    def test_decodes_double_escaped_entities(self):
        assert clean_text("A &amp;amp; B") == "A & B"

    def test_strips_tags(self):
        assert clean_text("<b>Bold</b> move") == "Bold move"

    def test_unwraps_cdata(self):
        assert clean_text("<![CDATA[Wrapped Title]]>") == "Wrapped Title"

    def test_strips_known_suffix(self):
        assert clean_text("Artist X Drops Album - XXL", ["XXL"]) == "Artist X Drops Album"

    def test_suffix_match_is_case_insensitive(self):
        assert clean_text("Artist X Drops Album | xxl", ["XXL"]) == "Artist X Drops Album"

    def test_longest_suffix_wins(self):
        assert clean_text("Headline - XXL Mag", ["XXL", "XXL Mag"]) == "Headline"

    def test_unknown_suffix_kept(self):
        assert clean_text("Jay-Z - Live in Brooklyn", ["XXL"]) == "Jay-Z - Live in Brooklyn"

    def test_hyphenated_words_untouched(self):
        assert clean_text("Rap-Up Exclusive", ["Rap-Up"]) == "Rap-Up Exclusive"

    def test_title_equal_to_suffix_kept(self):
        assert clean_text("XXL", ["XXL"]) == "XXL"

    @pytest.mark.parametrize(
        "raw",
        [
            "  Artist X &amp;amp; Friends - XXL - XXL ",
            "<p>Line one</p>\n\n<p>Line two</p>",
            "Plain title",
            "Quote &quot;this&quot; - Rap-Up",
            "",
        ],
    )
    def test_idempotent(self, raw):
        suffixes = ["XXL", "Rap-Up"]
        once = clean_text(raw, suffixes)
        assert clean_text(once, suffixes) == once


# --- Item construction ---


class TestBuildItem:
    def test_builds_item(self):
        item = build_item(
            kind=ItemKind.FEED_POST,
            source="XXL",
            title=" Headline ",
            url="https://example.com/a",
            published_at="2025-06-15T10:00:00Z",
        )
        assert item.title == "Headline"
        assert item.url == "https://example.com/a"
        assert item.published_at == datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)

    def test_missing_title_dropped(self):
        assert build_item(
            kind=ItemKind.FEED_POST, source="XXL", title="  ", url="https://example.com/a"
        ) is None

    def test_unresolvable_url_dropped(self):
        assert build_item(
            kind=ItemKind.FEED_POST, source="XXL", title="Headline", url="not-a-url"
        ) is None

    def test_alternate_url_used(self):
        item = build_item(
            kind=ItemKind.FEED_POST, source="XXL", title="Headline",
            url=None, alternate_url="https://example.com/guid",
        )
        assert item.url == "https://example.com/guid"

    def test_missing_timestamp_kept_as_none(self):
        item = build_item(
            kind=ItemKind.FEED_POST, source="XXL", title="Headline", url="https://example.com/a"
        )
        assert item.published_at is None

    def test_items_are_immutable(self):
        item = _item("Headline")
        with pytest.raises(AttributeError):
            item.title = "Other"


class TestNormalizeItems:
    def test_strips_own_source_suffix(self):
        result = normalize_items([_item("Artist X Drops Album - SourceName", source="SourceName")])
        assert result[0].title == "Artist X Drops Album"

    def test_strips_configured_suffix(self):
        result = normalize_items([_item("Headline - Billboard")], ["Billboard"])
        assert result[0].title == "Headline"

    def test_drops_items_cleaned_to_nothing(self):
        assert normalize_items([_item("<br/>")]) == []

    def test_does_not_mutate_input(self):
        original = _item("  Spaced   out  ")
        normalize_items([original])
        assert original.title == "  Spaced   out  "

    def test_idempotent(self):
        items = [_item("Tom &amp; Jerry - Test Source"), _item("  A   B ")]
        once = normalize_items(items, ["XXL"])
        assert normalize_items(once, ["XXL"]) == once
