"""In-run deduplication of items reported by more than one source."""

from __future__ import annotations

import logging
import re
import unicodedata

from trendwatch.ingestion.normalize import Item

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 200


def _normalize_text(text: str) -> str:
    """Normalize text for key comparison.

    - Unicode NFC normalization
    - Lowercase
    - Collapse all whitespace (spaces, tabs, newlines) to single spaces
    - Strip leading/trailing whitespace
    """
    text = unicodedata.normalize("NFC", text)
    text = text.lower()
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def dedup_key(item: Item, max_length: int = MAX_KEY_LENGTH) -> str:
    """Build the ``kind|title`` key, truncated to *max_length* characters."""
    key = f"{item.kind.value}|{_normalize_text(item.title)}"
    return key[:max_length]


def deduplicate(items: list[Item], max_length: int = MAX_KEY_LENGTH) -> list[Item]:
    """Keep the first item seen for each dedup key, in arrival order.

    Which duplicate survives depends only on arrival order (the order
    sources are configured), not on which copy is better.
    """
    seen: set[str] = set()
    kept: list[Item] = []
    for item in items:
        key = dedup_key(item, max_length)
        if key in seen:
            logger.debug("Duplicate dropped: %s (%s)", item.title, item.source)
            continue
        seen.add(key)
        kept.append(item)
    if len(kept) < len(items):
        logger.info("Deduplicated %d items down to %d", len(items), len(kept))
    return kept
