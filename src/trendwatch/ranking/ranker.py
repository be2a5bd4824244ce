"""Composite ranking: engagement (or a flat feed baseline) plus a recency boost."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from trendwatch.ingestion.normalize import Item, ItemKind

logger = logging.getLogger(__name__)

FEED_BASE_SCORE = 10.0

# (max age in minutes, boost); first matching step wins.
RECENCY_STEPS: tuple[tuple[int, float], ...] = (
    (60, 100.0),
    (180, 50.0),
    (720, 20.0),
)


@dataclass(frozen=True)
class RankedItem:
    """An item paired with its computed rank. The item itself is untouched."""

    item: Item
    rank: float


def base_score(item: Item, feed_base: float = FEED_BASE_SCORE) -> float:
    if item.kind is ItemKind.SOCIAL_POST:
        return float(item.engagement_score or 0.0)
    return feed_base


def recency_boost(published_at: datetime | None, now: datetime) -> float:
    """Step-function bonus by age in minutes. No timestamp means no boost."""
    if published_at is None:
        return 0.0
    age_minutes = max(0.0, (now - published_at).total_seconds() / 60.0)
    for max_age, boost in RECENCY_STEPS:
        if age_minutes <= max_age:
            return boost
    return 0.0


def rank_items(
    items: list[Item],
    *,
    now: datetime | None = None,
    feed_base: float = FEED_BASE_SCORE,
) -> list[RankedItem]:
    """Score every item and order by descending rank.

    The sort is stable, so equal ranks keep their arrival order.
    """
    now = now or datetime.now(timezone.utc)
    ranked = [
        RankedItem(
            item=item,
            rank=base_score(item, feed_base) + recency_boost(item.published_at, now),
        )
        for item in items
    ]
    ranked.sort(key=lambda r: r.rank, reverse=True)
    logger.debug("Ranked %d items", len(ranked))
    return ranked
