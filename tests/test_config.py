"""Tests for trendwatch.config."""

import json

import pytest

from trendwatch.config import (
    DEFAULT_ADAPTERS,
    DEFAULT_DENYLIST,
    SourcesConfig,
    clamp_result_limit,
    load_config,
    load_sources,
)
from trendwatch.errors import ConfigurationError

_CONFIG_VARS = (
    "WEBHOOK_URL", "SEARCH_BEARER_TOKEN", "SOCIAL_MODE", "RESULT_LIMIT",
    "MAX_PAYLOAD_CHARS", "FETCH_TIMEOUT_SECONDS", "DELIVERY_MAX_RETRIES",
    "DIGEST_TITLE", "DIGEST_TIMEZONE", "SOURCES_CONFIG_PATH", "USER_AGENT",
    "LOG_LEVEL", "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove all config-related env vars before each test."""
    for key in _CONFIG_VARS:
        monkeypatch.delenv(key, raising=False)
    # Prevent .env file from re-setting variables during tests
    monkeypatch.setattr("trendwatch.config.load_dotenv", lambda *a, **kw: None)


def test_missing_webhook_raises():
    """load_config raises ConfigurationError naming the missing variable."""
    with pytest.raises(ConfigurationError, match="WEBHOOK_URL"):
        load_config()


def test_blank_webhook_raises(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "   ")
    with pytest.raises(ConfigurationError):
        load_config()


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_defaults(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")

    config = load_config()

    assert config.webhook_url == "https://hooks.example.com/1"
    assert config.search_bearer_token is None
    assert config.social_mode == "both"
    assert config.result_limit == 10
    assert config.max_payload_chars == 2000
    assert config.fetch_timeout_seconds == 15.0
    assert config.digest_timezone == "America/New_York"
    assert config.sources_config_path is None
    assert config.log_format == "json"


def test_optional_overrides(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    monkeypatch.setenv("SEARCH_BEARER_TOKEN", "token")
    monkeypatch.setenv("SOCIAL_MODE", "Timeline")
    monkeypatch.setenv("MAX_PAYLOAD_CHARS", "4000")
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("DIGEST_TIMEZONE", "UTC")

    config = load_config()

    assert config.search_bearer_token == "token"
    assert config.social_mode == "timeline"
    assert config.max_payload_chars == 4000
    assert config.fetch_timeout_seconds == 2.5
    assert config.digest_timezone == "UTC"


def test_empty_credential_treated_as_absent(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    monkeypatch.setenv("SEARCH_BEARER_TOKEN", "")
    assert load_config().search_bearer_token is None


@pytest.mark.parametrize("raw, expected", [("1", 5), ("12", 12), ("500", 20), ("-3", 5)])
def test_result_limit_clamped(monkeypatch, raw, expected):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    monkeypatch.setenv("RESULT_LIMIT", raw)
    assert load_config().result_limit == expected


def test_clamp_result_limit_bounds():
    assert clamp_result_limit(5) == 5
    assert clamp_result_limit(20) == 20


def test_non_integer_limit_raises(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    monkeypatch.setenv("RESULT_LIMIT", "lots")
    with pytest.raises(ConfigurationError, match="RESULT_LIMIT"):
        load_config()


def test_invalid_mode_raises(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    monkeypatch.setenv("SOCIAL_MODE", "everything")
    with pytest.raises(ConfigurationError, match="SOCIAL_MODE"):
        load_config()


def test_invalid_timezone_raises(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    monkeypatch.setenv("DIGEST_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ConfigurationError, match="DIGEST_TIMEZONE"):
        load_config()


def test_config_is_frozen(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", "https://hooks.example.com/1")
    config = load_config()
    with pytest.raises(AttributeError):
        config.webhook_url = "other"


# --- Sources file ---


def test_load_sources_defaults():
    sources = load_sources(None)
    assert sources.adapters == DEFAULT_ADAPTERS
    assert sources.denylist == DEFAULT_DENYLIST


def test_load_sources_from_file(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps({
        "adapters": [{"type": "feed", "name": "A", "url": "https://a.com/feed"}],
        "denylist": ["Politics"],
        "title_suffixes": ["A"],
    }))

    sources = load_sources(str(path))

    assert sources.adapters == [{"type": "feed", "name": "A", "url": "https://a.com/feed"}]
    assert sources.denylist == ("politics",)
    assert sources.title_suffixes == ("A",)


def test_load_sources_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps({"denylist": []}))

    sources = load_sources(str(path))

    assert sources.denylist == ()
    assert sources.adapters == SourcesConfig().adapters


def test_load_sources_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_sources(str(tmp_path / "nope.json"))


def test_load_sources_invalid_json_raises(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_sources(str(path))


def test_load_sources_non_object_raises(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text("[]")
    with pytest.raises(ConfigurationError, match="JSON object"):
        load_sources(str(path))


@pytest.mark.parametrize(
    "content, key",
    [
        ({"denylist": "election"}, "denylist"),
        ({"denylist": ["election", 3]}, "denylist"),
        ({"title_suffixes": "XXL"}, "title_suffixes"),
        ({"adapters": {"type": "feed"}}, "adapters"),
        ({"adapters": ["https://example.com/rss"]}, "adapters"),
    ],
)
def test_load_sources_wrong_shape_raises(tmp_path, content, key):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps(content))
    with pytest.raises(ConfigurationError, match=key):
        load_sources(str(path))


def test_load_sources_string_denylist_not_split_into_letters(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps({"adapters": [], "denylist": "election"}))
    with pytest.raises(ConfigurationError):
        load_sources(str(path))
