"""Item model and text normalization — validate adapter output, clean titles."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_ENTITIES = {"&amp;": "&", "&quot;": '"', "&#39;": "'"}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))
_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_HTML_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


class ItemKind(str, Enum):
    """Which scoring rule applies to an item."""

    FEED_POST = "feed_post"
    SOCIAL_POST = "social_post"


@dataclass(frozen=True)
class Item:
    """A single piece of trending content, normalized across sources."""

    kind: ItemKind
    source: str
    title: str
    url: str
    published_at: datetime | None = None
    engagement_score: float | None = None


def is_absolute_url(value: str | None) -> bool:
    """Return True for a well-formed absolute http(s) URL."""
    if not value or not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def resolve_url(primary: str | None, alternate: str | None = None) -> str | None:
    """Pick the canonical link for an item.

    The primary link wins when it is an absolute URL. The alternate field
    (a feed guid, a post id turned permalink) is used only when the primary
    is absent or malformed, and only if it is itself an absolute URL.
    """
    if is_absolute_url(primary):
        return primary.strip()
    if is_absolute_url(alternate):
        return alternate.strip()
    return None


def parse_timestamp(value) -> datetime | None:
    """Normalize a source timestamp to an aware UTC datetime.

    Accepts datetimes, ISO 8601 strings (including a trailing ``Z``),
    RFC 2822 dates as found in RSS, and epoch seconds. Returns None for
    anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            try:
                dt = parsedate_to_datetime(raw)
            except (TypeError, ValueError):
                return None
    else:
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _decode_entities(text: str) -> str:
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def _clean_once(text: str, suffix_re: re.Pattern | None) -> str:
    text = _CDATA_RE.sub(r"\1", text)
    text = _HTML_TAG_RE.sub("", text)
    text = _decode_entities(text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if suffix_re is not None:
        text = suffix_re.sub("", text).strip()
    return text


def _suffix_pattern(suffixes) -> re.Pattern | None:
    names = [s.strip() for s in suffixes if s and s.strip()]
    if not names:
        return None
    # Longest first so "XXL Mag" wins over "XXL".
    names.sort(key=len, reverse=True)
    alternatives = "|".join(re.escape(name) for name in names)
    return re.compile(rf"\s+[-|–—]\s+(?:{alternatives})$", re.IGNORECASE)


def clean_text(text: str, suffixes=()) -> str:
    """Clean a title or display name.

    Unwraps CDATA, drops markup tags, decodes ``&amp;``, ``&quot;`` and
    ``&#39;``, collapses whitespace and strips any trailing " - Source"
    suffix naming one of *suffixes*. Cleaning repeats until the text stops
    changing, so the result is a fixed point: cleaning it again is a no-op.
    """
    suffix_re = _suffix_pattern(suffixes)
    current = text or ""
    while True:
        cleaned = _clean_once(current, suffix_re)
        if cleaned == current:
            return cleaned
        current = cleaned


def build_item(
    *,
    kind: ItemKind,
    source: str,
    title: str | None,
    url: str | None,
    alternate_url: str | None = None,
    published_at=None,
    engagement_score: float | None = None,
) -> Item | None:
    """Validate raw adapter fields and build an Item.

    Returns None when the title is empty or no absolute URL can be resolved;
    such entries never leave the adapter.
    """
    title = (title or "").strip()
    link = resolve_url(url, alternate_url)
    if not title or link is None:
        logger.debug("Dropping entry from %s: title=%r url=%r", source, title, url)
        return None
    return Item(
        kind=kind,
        source=(source or "").strip() or "unknown",
        title=title,
        url=link,
        published_at=parse_timestamp(published_at),
        engagement_score=engagement_score,
    )


def normalize_items(items: list[Item], suffixes=()) -> list[Item]:
    """Clean every item's title and source name.

    Each item's own source name is treated as a removable title suffix in
    addition to the configured ones. Items whose title cleans down to
    nothing are dropped.
    """
    normalized: list[Item] = []
    for item in items:
        source = clean_text(item.source) or item.source
        title = clean_text(item.title, (*suffixes, source))
        if not title:
            logger.debug("Dropping item with empty cleaned title from %s", source)
            continue
        normalized.append(replace(item, title=title, source=source))
    return normalized
