"""Application entry point — runs one digest and exits."""

from __future__ import annotations

import json
import logging
import sys

from trendwatch.config import load_config
from trendwatch.errors import ConfigurationError, TrendwatchError
from trendwatch.jobs import run_digest

logger = logging.getLogger("trendwatch")


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def main() -> int:
    """Load config, run the pipeline once, and return the process exit code."""
    try:
        config = load_config()
    except ConfigurationError as exc:
        _setup_logging("INFO", "text")
        logger.error("Configuration error: %s", exc)
        return 1

    _setup_logging(config.log_level, config.log_format)
    logger.info("Trendwatch run starting (mode=%s)", config.social_mode)

    try:
        result = run_digest(config)
    except TrendwatchError as exc:
        logger.error("Run failed: %s", exc)
        return 1

    logger.info(
        "Run complete: %d sources, %d skipped, %d items ranked",
        len(result.sources), len(result.failures), result.items_ranked,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
