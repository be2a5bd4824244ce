"""Junk filter — drop items about topics outside the digest's domain."""

from __future__ import annotations

import logging

from trendwatch.ingestion.normalize import Item

logger = logging.getLogger(__name__)


def is_junk(item: Item, denylist) -> bool:
    """True if the lowercased title contains any denylisted term."""
    title = item.title.lower()
    return any(term and term.lower() in title for term in denylist)


def filter_junk(items: list[Item], denylist) -> list[Item]:
    """Return *items* without the junk ones, preserving order."""
    kept = [item for item in items if not is_junk(item, denylist)]
    dropped = len(items) - len(kept)
    if dropped:
        logger.info("Junk filter dropped %d of %d items", dropped, len(items))
    return kept
