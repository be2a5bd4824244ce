"""Configuration loading and validation."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from trendwatch.errors import ConfigurationError

SOCIAL_MODES = frozenset({"timeline", "search", "both"})

RESULT_LIMIT_MIN = 5
RESULT_LIMIT_MAX = 20

DEFAULT_ADAPTERS: list[dict] = [
    {
        "type": "feed",
        "name": "Google News",
        "url": "https://news.google.com/rss/search?q=hip+hop+rap&hl=en-US&gl=US&ceid=US:en",
    },
    {"type": "feed", "name": "XXL", "url": "https://www.xxlmag.com/feed/"},
    {"type": "feed", "name": "Rap-Up", "url": "https://www.rap-up.com/feed/"},
    {"type": "search", "strategy": "timeline", "handle": "XXL"},
    {"type": "search", "strategy": "search", "query": "new rap album"},
    {"type": "reddit", "subreddit": "hiphopheads"},
    {"type": "reddit", "subreddit": "rap"},
    {"type": "reddit", "subreddit": "hiphop101"},
]

DEFAULT_DENYLIST: tuple[str, ...] = (
    "election",
    "stock market",
    "weather forecast",
    "recipe",
    "horoscope",
    "mortgage",
)

DEFAULT_TITLE_SUFFIXES: tuple[str, ...] = (
    "HotNewHipHop",
    "XXL",
    "XXL Mag",
    "Complex",
    "Rap-Up",
    "Billboard",
    "Pitchfork",
    "Rolling Stone",
    "VIBE.com",
    "HipHopDX",
)


@dataclass(frozen=True)
class SourcesConfig:
    """Source definitions plus the filter and cleaning heuristics."""

    adapters: list[dict] = field(default_factory=lambda: list(DEFAULT_ADAPTERS))
    denylist: tuple[str, ...] = DEFAULT_DENYLIST
    title_suffixes: tuple[str, ...] = DEFAULT_TITLE_SUFFIXES


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    webhook_url: str

    # Optional — Sources
    search_bearer_token: str | None = None
    social_mode: str = "both"
    result_limit: int = 10
    fetch_timeout_seconds: float = 15.0
    user_agent: str = "trendwatch/1.0"
    sources_config_path: str | None = None

    # Optional — Digest
    digest_title: str = "Rap Trend Watch"
    digest_timezone: str = "America/New_York"
    max_payload_chars: int = 2000
    delivery_max_retries: int = 3

    # Optional — Application
    log_level: str = "INFO"
    log_format: str = "json"


def clamp_result_limit(value: int) -> int:
    """Clamp a per-source result count into the supported range."""
    return max(RESULT_LIMIT_MIN, min(RESULT_LIMIT_MAX, value))


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that the delivery endpoint is set. Raises ConfigurationError if it is
    missing or any optional value is malformed.
    """
    load_dotenv(dotenv_path=env_path)

    webhook_url = os.environ.get("WEBHOOK_URL", "").strip()
    if not webhook_url:
        raise ConfigurationError("Missing required environment variable: WEBHOOK_URL")

    social_mode = os.environ.get("SOCIAL_MODE", "both").strip().lower()
    if social_mode not in SOCIAL_MODES:
        raise ConfigurationError(
            f"SOCIAL_MODE '{social_mode}' is not valid; "
            f"must be one of: {', '.join(sorted(SOCIAL_MODES))}"
        )

    digest_timezone = os.environ.get("DIGEST_TIMEZONE", "America/New_York")
    try:
        ZoneInfo(digest_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(
            f"DIGEST_TIMEZONE '{digest_timezone}' is not a known timezone"
        ) from None

    max_payload_chars = _int_env("MAX_PAYLOAD_CHARS", 2000)
    if max_payload_chars <= 0:
        raise ConfigurationError("MAX_PAYLOAD_CHARS must be positive")

    return Config(
        # Required
        webhook_url=webhook_url,
        # Optional — Sources
        search_bearer_token=os.environ.get("SEARCH_BEARER_TOKEN") or None,
        social_mode=social_mode,
        result_limit=clamp_result_limit(_int_env("RESULT_LIMIT", 10)),
        fetch_timeout_seconds=_float_env("FETCH_TIMEOUT_SECONDS", 15.0),
        user_agent=os.environ.get("USER_AGENT", "trendwatch/1.0"),
        sources_config_path=os.environ.get("SOURCES_CONFIG_PATH") or None,
        # Optional — Digest
        digest_title=os.environ.get("DIGEST_TITLE", "Rap Trend Watch"),
        digest_timezone=digest_timezone,
        max_payload_chars=max_payload_chars,
        delivery_max_retries=max(1, _int_env("DELIVERY_MAX_RETRIES", 3)),
        # Optional — Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
    )


def _string_list(data: dict, key: str, default: tuple[str, ...], path) -> tuple[str, ...]:
    value = data.get(key, default)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"Sources config {path}: '{key}' must be a list of strings")
    return tuple(value)


def load_sources(path: str | Path | None) -> SourcesConfig:
    """Load source definitions from a JSON file, or the built-in defaults.

    Keys missing from the file fall back to their defaults, so a file may
    override only the denylist, only the adapters, and so on. Raises
    ConfigurationError when the file is unreadable or a key has the wrong
    shape: ``adapters`` must be a list of objects, ``denylist`` and
    ``title_suffixes`` lists of strings.
    """
    if path is None:
        return SourcesConfig()

    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Cannot read sources config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Sources config {path} must be a JSON object")

    defaults = SourcesConfig()
    adapters = data.get("adapters", defaults.adapters)
    if not isinstance(adapters, list) or not all(isinstance(a, dict) for a in adapters):
        raise ConfigurationError(f"Sources config {path}: 'adapters' must be a list of objects")

    denylist = _string_list(data, "denylist", defaults.denylist, path)
    return SourcesConfig(
        adapters=list(adapters),
        denylist=tuple(term.lower() for term in denylist),
        title_suffixes=_string_list(data, "title_suffixes", defaults.title_suffixes, path),
    )
