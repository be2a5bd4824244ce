"""Run coordinator — fetch all sources, run the pipeline, render, deliver."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone

from zoneinfo import ZoneInfo

from trendwatch.config import Config, SourcesConfig, load_sources
from trendwatch.digest.renderer import render_digest
from trendwatch.digest.webhook import post_message
from trendwatch.errors import SourceFetchError
import trendwatch.ingestion  # noqa: F401  registers adapters
from trendwatch.ingestion.adapter import FailureRecord, FetchOutcome, SourceAdapter
from trendwatch.ingestion.dedup import deduplicate
from trendwatch.ingestion.filters import filter_junk
from trendwatch.ingestion.normalize import Item, normalize_items
from trendwatch.ingestion.registry import get_adapter_class, registered_types
from trendwatch.ranking.ranker import RankedItem, rank_items

logger = logging.getLogger(__name__)

_MODE_STRATEGIES = {
    "timeline": {"timeline"},
    "search": {"search"},
    "both": {"timeline", "search"},
}


@dataclass(frozen=True)
class RunResult:
    """Summary of one completed run."""

    sources: list[str]
    failures: list[FailureRecord]
    items_fetched: int
    items_ranked: int
    payload: str
    status_code: int


def build_adapters(config: Config, sources: SourcesConfig) -> list[SourceAdapter]:
    """Instantiate and configure adapters in sources-file order."""
    strategies = _MODE_STRATEGIES[config.social_mode]
    adapters: list[SourceAdapter] = []

    for adapter_config in sources.adapters:
        adapter_type = adapter_config.get("type", "")
        adapter_cls = get_adapter_class(adapter_type)
        if adapter_cls is None:
            logger.warning(
                "Unknown adapter type '%s' (known: %s), skipping",
                adapter_type, ", ".join(registered_types()),
            )
            continue
        if not adapter_config.get("enabled", True):
            continue
        if adapter_type == "search" and adapter_config.get("strategy", "search") not in strategies:
            logger.debug(
                "Search strategy '%s' not selected by mode '%s'",
                adapter_config.get("strategy", "search"), config.social_mode,
            )
            continue

        adapter = adapter_cls(config)
        try:
            adapter.configure(adapter_config)
        except (KeyError, ValueError) as exc:
            logger.warning("Invalid %s adapter config %r: %s", adapter_type, adapter_config, exc)
            continue
        adapters.append(adapter)

    return adapters


def _run_adapter(adapter: SourceAdapter) -> FetchOutcome:
    """Invoke one adapter, turning any failure into a FailureRecord."""
    try:
        items = adapter.fetch()
    except SourceFetchError as exc:
        return FetchOutcome(adapter.name, failure=FailureRecord(adapter.name, exc.message))
    except Exception as exc:
        logger.exception("Adapter '%s' fetch failed unexpectedly", adapter.name)
        message = str(exc) or type(exc).__name__
        return FetchOutcome(adapter.name, failure=FailureRecord(adapter.name, message))
    return FetchOutcome(adapter.name, items=items)


def collect_sources(adapters: list[SourceAdapter]) -> list[FetchOutcome]:
    """Fetch every adapter concurrently and wait for all of them to settle.

    Outcomes come back in adapter order, whatever order the fetches finish
    in. Adapters with a skip reason are recorded as failures without being
    called. If the wait is interrupted, pending fetches are cancelled and
    the interruption propagates.
    """
    outcomes: dict[int, FetchOutcome] = {}
    runnable: list[tuple[int, SourceAdapter]] = []
    for index, adapter in enumerate(adapters):
        reason = adapter.skip_reason
        if reason is not None:
            outcomes[index] = FetchOutcome(
                adapter.name, failure=FailureRecord(adapter.name, reason), attempted=False
            )
        else:
            runnable.append((index, adapter))

    if runnable:
        executor = ThreadPoolExecutor(
            max_workers=len(runnable), thread_name_prefix="trendwatch-fetch"
        )
        futures = {index: executor.submit(_run_adapter, adapter) for index, adapter in runnable}
        try:
            wait(futures.values())
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown()
        for index, future in futures.items():
            outcomes[index] = future.result()

    ordered = [outcomes[index] for index in range(len(adapters))]
    for outcome in ordered:
        if not outcome.ok:
            logger.warning(
                "Source '%s' skipped: %s",
                outcome.failure.source_name, outcome.failure.error_message,
            )
    return ordered


def process_items(
    items: list[Item],
    sources: SourcesConfig,
    *,
    now: datetime | None = None,
) -> list[RankedItem]:
    """Normalize, filter, deduplicate and rank the merged items."""
    normalized = normalize_items(items, sources.title_suffixes)
    filtered = filter_junk(normalized, sources.denylist)
    unique = deduplicate(filtered)
    ranked = rank_items(unique, now=now)
    logger.info(
        "Pipeline: %d fetched, %d normalized, %d after filter, %d unique",
        len(items), len(normalized), len(filtered), len(unique),
    )
    return ranked


def run_digest(config: Config, *, now: datetime | None = None) -> RunResult:
    """Run the whole pipeline once and deliver the digest.

    Raises EmptyDigestError if nothing survives the pipeline and
    DeliveryError if the webhook rejects the payload.
    """
    now = now or datetime.now(timezone.utc)
    sources = load_sources(config.sources_config_path)
    adapters = build_adapters(config, sources)
    logger.info("Fetching %d sources", len(adapters))

    outcomes = collect_sources(adapters)
    items = [item for outcome in outcomes for item in outcome.items]
    failures = [outcome.failure for outcome in outcomes if not outcome.ok]
    source_names = [outcome.source_name for outcome in outcomes]
    attempted = [outcome.source_name for outcome in outcomes if outcome.attempted]

    ranked = process_items(items, sources, now=now)

    payload = render_digest(
        ranked,
        failures,
        sources=source_names,
        attempted=attempted,
        generated_at=now.astimezone(ZoneInfo(config.digest_timezone)),
        title=config.digest_title,
        max_length=config.max_payload_chars,
    )
    status_code = post_message(
        config.webhook_url,
        payload,
        max_retries=config.delivery_max_retries,
    )

    return RunResult(
        sources=source_names,
        failures=failures,
        items_fetched=len(items),
        items_ranked=len(ranked),
        payload=payload,
        status_code=status_code,
    )
