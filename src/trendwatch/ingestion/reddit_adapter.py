"""Reddit source adapter — fetches hot posts from one subreddit."""

from __future__ import annotations

import logging

from trendwatch.config import Config
from trendwatch.errors import SourceFetchError
from trendwatch.ingestion.adapter import SourceAdapter
from trendwatch.ingestion.fetch import fetch_json
from trendwatch.ingestion.normalize import Item, ItemKind, build_item

logger = logging.getLogger(__name__)

_REDDIT_HOT_URL = "https://www.reddit.com/r/{}/hot.json"


def reddit_engagement(post: dict) -> float:
    """Upvotes plus twice the comment count."""
    return float((post.get("ups") or 0) + 2 * (post.get("num_comments") or 0))


class RedditAdapter(SourceAdapter):
    """Adapter for a subreddit's hot listing."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._subreddit = ""

    @property
    def name(self) -> str:
        return f"r/{self._subreddit}"

    def configure(self, config: dict) -> None:
        self._subreddit = config["subreddit"].removeprefix("r/")

    def fetch(self) -> list[Item]:
        data = fetch_json(
            self.name,
            _REDDIT_HOT_URL.format(self._subreddit),
            self._config,
            params={"limit": self._config.result_limit},
        )
        if not isinstance(data, dict):
            raise SourceFetchError(self.name, "unexpected listing payload")

        items: list[Item] = []
        for post_wrapper in data.get("data", {}).get("children", []):
            if len(items) >= self._config.result_limit:
                break
            post = post_wrapper.get("data", {})
            permalink = post.get("permalink")
            item = build_item(
                kind=ItemKind.SOCIAL_POST,
                source=self.name,
                title=post.get("title"),
                url=f"https://www.reddit.com{permalink}" if permalink else None,
                alternate_url=post.get("url"),
                published_at=post.get("created_utc"),
                engagement_score=reddit_engagement(post),
            )
            if item is not None:
                items.append(item)

        logger.info("Fetched %d posts from Reddit %s", len(items), self.name)
        return items
