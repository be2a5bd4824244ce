"""RSS/Atom feed source adapter."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import feedparser

from trendwatch.config import Config
from trendwatch.errors import SourceFetchError
from trendwatch.ingestion.adapter import SourceAdapter
from trendwatch.ingestion.fetch import fetch_response
from trendwatch.ingestion.normalize import Item, ItemKind, build_item

logger = logging.getLogger(__name__)


def _parse_pub_date(entry: dict):
    """Return the entry's publication time as a string or aware datetime, if any."""
    raw = entry.get("published") or entry.get("updated")
    if raw:
        return raw
    # feedparser sometimes only provides a parsed tuple
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed:
        try:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
        except (ValueError, TypeError):
            pass
    return None


def parse_feed(source_name: str, text: str, limit: int | None = None) -> list[Item]:
    """Extract items from feed document text.

    feedparser is forgiving about malformed markup; CDATA-wrapped titles
    come back unwrapped. An entry's guid is used as its link only when the
    ``<link>`` is missing or not absolute. Raises SourceFetchError only when
    the document is not recognizable as a feed at all.
    """
    feed = feedparser.parse(text)
    if feed.bozo and not feed.entries and not feed.feed:
        reason = getattr(feed, "bozo_exception", None) or "unrecognized document"
        raise SourceFetchError(source_name, f"unparseable feed: {reason}")

    entries = feed.entries if limit is None else feed.entries[:limit]
    items: list[Item] = []
    for entry in entries:
        item = build_item(
            kind=ItemKind.FEED_POST,
            source=source_name,
            title=entry.get("title"),
            url=entry.get("link"),
            alternate_url=entry.get("id"),
            published_at=_parse_pub_date(entry),
        )
        if item is not None:
            items.append(item)
    return items


class FeedAdapter(SourceAdapter):
    """Adapter for a single RSS or Atom feed."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._name = "feed"
        self._url = ""

    @property
    def name(self) -> str:
        return self._name

    def configure(self, config: dict) -> None:
        """Accept feed configuration.

        Expected format: {"name": "...", "url": "..."}
        """
        self._url = config["url"]
        self._name = config.get("name") or self._url

    def fetch(self) -> list[Item]:
        response = fetch_response(self.name, self._url, self._config)
        items = parse_feed(self.name, response.text, limit=self._config.result_limit)
        logger.info("Fetched %d items from %s", len(items), self.name)
        return items
