"""Error taxonomy for a digest run."""

from __future__ import annotations


class TrendwatchError(Exception):
    """Base class for all trendwatch errors."""


class ConfigurationError(TrendwatchError, ValueError):
    """Required configuration is missing or invalid. Raised before any fetch."""


class SourceFetchError(TrendwatchError):
    """A single source could not be fetched or parsed.

    Recoverable: the coordinator turns it into a FailureRecord and the run
    continues with the remaining sources.
    """

    def __init__(self, source: str, message: str, status_code: int | None = None) -> None:
        self.source = source
        self.message = message
        self.status_code = status_code
        super().__init__(f"{source}: {message}")


class EmptyDigestError(TrendwatchError):
    """No items survived the pipeline across all sources."""

    def __init__(self, attempted: list[str], failed: list[str]) -> None:
        self.attempted = list(attempted)
        self.failed = list(failed)
        attempted_text = ", ".join(self.attempted) or "none"
        failed_text = ", ".join(self.failed) or "none"
        super().__init__(
            f"No items to render (attempted: {attempted_text}; failed: {failed_text})"
        )


class DeliveryError(TrendwatchError):
    """The delivery endpoint rejected the payload or could not be reached."""

    def __init__(self, status_code: int | None, body: str) -> None:
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        super().__init__(f"Delivery failed ({status}): {body}")
