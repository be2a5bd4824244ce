"""Ingestion — source fetching, normalization, filtering and deduplication."""

from trendwatch.ingestion.feed_adapter import FeedAdapter
from trendwatch.ingestion.reddit_adapter import RedditAdapter
from trendwatch.ingestion.registry import register_adapter
from trendwatch.ingestion.search_adapter import SocialSearchAdapter

register_adapter("feed", FeedAdapter)
register_adapter("search", SocialSearchAdapter)
register_adapter("reddit", RedditAdapter)
