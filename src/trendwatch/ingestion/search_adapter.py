"""Social search adapter — recent posts by handle or keyword via the X API v2."""

from __future__ import annotations

import logging

from trendwatch.config import Config
from trendwatch.ingestion.adapter import SourceAdapter
from trendwatch.ingestion.fetch import fetch_json
from trendwatch.ingestion.normalize import Item, ItemKind, build_item

logger = logging.getLogger(__name__)

_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"
_POST_URL = "https://x.com/{}/status/{}"
_FALLBACK_POST_URL = "https://x.com/i/web/status/{}"
# The recent-search endpoint rejects max_results below 10.
_API_MIN_RESULTS = 10

STRATEGIES = frozenset({"timeline", "search"})


def engagement_score(metrics: dict) -> float:
    """likes + 2 x reshares + replies."""
    return float(
        (metrics.get("like_count") or 0)
        + 2 * (metrics.get("retweet_count") or 0)
        + (metrics.get("reply_count") or 0)
    )


def parse_search_response(source_name: str, data: dict, limit: int | None = None) -> list[Item]:
    """Turn a recent-search response body into SocialPost items."""
    users = {
        user.get("id"): user.get("username")
        for user in (data.get("includes") or {}).get("users", [])
    }
    posts = data.get("data") or []
    if limit is not None:
        posts = posts[:limit]

    items: list[Item] = []
    for post in posts:
        post_id = post.get("id")
        username = users.get(post.get("author_id"))
        url = _POST_URL.format(username, post_id) if username and post_id else None
        alternate = _FALLBACK_POST_URL.format(post_id) if post_id else None
        item = build_item(
            kind=ItemKind.SOCIAL_POST,
            source=f"@{username}" if username else source_name,
            title=post.get("text"),
            url=url,
            alternate_url=alternate,
            published_at=post.get("created_at"),
            engagement_score=engagement_score(post.get("public_metrics") or {}),
        )
        if item is not None:
            items.append(item)
    return items


class SocialSearchAdapter(SourceAdapter):
    """Adapter for recent posts from one account or one search term."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._strategy = "search"
        self._handle = ""
        self._query = ""

    @property
    def name(self) -> str:
        if self._strategy == "timeline":
            return f"@{self._handle}"
        return f"X search: {self._query}"

    @property
    def skip_reason(self) -> str | None:
        if not self._config.search_bearer_token:
            return "no search API credential configured"
        return None

    def configure(self, config: dict) -> None:
        """Accept search configuration.

        Expected format, one of:
        {"strategy": "timeline", "handle": "..."}
        {"strategy": "search", "query": "..."}
        """
        strategy = config.get("strategy", "search")
        if strategy not in STRATEGIES:
            raise ValueError(
                f"search strategy '{strategy}' is not valid; "
                f"must be one of: {', '.join(sorted(STRATEGIES))}"
            )
        self._strategy = strategy
        if strategy == "timeline":
            self._handle = config["handle"].lstrip("@")
        else:
            self._query = config["query"]

    def _build_query(self) -> str:
        if self._strategy == "timeline":
            return f"from:{self._handle} -is:retweet"
        return f"{self._query} -is:retweet"

    def fetch(self) -> list[Item]:
        limit = self._config.result_limit
        data = fetch_json(
            self.name,
            _SEARCH_URL,
            self._config,
            params={
                "query": self._build_query(),
                "max_results": max(limit, _API_MIN_RESULTS),
                "tweet.fields": "created_at,public_metrics,author_id",
                "expansions": "author_id",
                "user.fields": "username",
            },
            headers={"Authorization": f"Bearer {self._config.search_bearer_token}"},
        )
        items = parse_search_response(self.name, data if isinstance(data, dict) else {}, limit)
        logger.info("Fetched %d posts from %s", len(items), self.name)
        return items
