"""Source adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from trendwatch.ingestion.normalize import Item


class SourceAdapter(ABC):
    """Abstract base class for source adapters.

    Every adapter knows how to fetch and parse items from one specific
    source. The rest of the pipeline is source-agnostic.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name, used in logs and failure notices."""

    @abstractmethod
    def configure(self, config: dict) -> None:
        """Accept adapter-specific configuration."""

    @abstractmethod
    def fetch(self) -> list[Item]:
        """Fetch items from the source.

        An empty list is a successful fetch. Network failures, non-2xx
        responses and unreadable payloads raise SourceFetchError.
        """

    @property
    def skip_reason(self) -> str | None:
        """Why this adapter cannot run at all, or None if it can."""
        return None


@dataclass(frozen=True)
class FailureRecord:
    """One source that did not complete during a run."""

    source_name: str
    error_message: str


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one adapter invocation: its items, or the failure.

    ``attempted`` is False for adapters recorded as skipped without being
    called, such as a search source with no credential.
    """

    source_name: str
    items: list[Item] = field(default_factory=list)
    failure: FailureRecord | None = None
    attempted: bool = True

    @property
    def ok(self) -> bool:
        return self.failure is None
