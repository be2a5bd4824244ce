"""Markdown rendering of a size-bounded digest."""

from __future__ import annotations

import logging
import re
from datetime import datetime

from trendwatch.errors import EmptyDigestError
from trendwatch.ingestion.adapter import FailureRecord
from trendwatch.ranking.ranker import RankedItem

logger = logging.getLogger(__name__)

WEBHOOK_MAX_LENGTH = 2000
MAX_TITLE_LENGTH = 200

FOOTER = "_Ranked by engagement and recency._"
TRUNCATION_MARKER = "\n…(truncated)"
BLOCK_SEPARATOR = "\n\n"

_TITLE_SPECIALS_RE = re.compile(r"([\\\[\]()])")


def escape_title(title: str) -> str:
    """Backslash-escape brackets, parentheses and backslashes in link text."""
    return _TITLE_SPECIALS_RE.sub(r"\\\1", title)


def escape_url(url: str) -> str:
    """Percent-encode characters that would close the link target early."""
    return url.replace(" ", "%20").replace("(", "%28").replace(")", "%29")


def _shorten(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def render_header(
    title: str,
    generated_at: datetime,
    sources: list[str],
    failures: list[FailureRecord],
) -> str:
    """Render the title line, the source summary and any skipped-source notice."""
    timestamp = generated_at.strftime("%b %d, %Y %I:%M %p %Z").strip()
    ok_count = len(sources) - len(failures)
    lines = [
        f"**{title} | {timestamp}**",
        f"Sources: {ok_count} ok, {len(failures)} skipped",
    ]
    for failure in failures:
        lines.append(f"Skipped: {failure.source_name} ({failure.error_message})")
    return "\n".join(lines)


def render_entry(position: int, ranked: RankedItem) -> str:
    """Render one numbered digest entry: linked title, then origin."""
    item = ranked.item
    title = escape_title(_shorten(item.title, MAX_TITLE_LENGTH))
    return f"{position}. [{title}]({escape_url(item.url)})\n   {item.source}"


def truncate_payload(body: str, max_length: int, footer: str = FOOTER) -> str:
    """Join *body* and *footer*, cutting the body to fit *max_length*.

    An overflowing body is cut and ends with the truncation marker, and the
    footer is still appended. Only when the footer and marker alone do not
    fit is the joined text itself cut.
    """
    joined = BLOCK_SEPARATOR.join([body, footer]) if footer else body
    if len(joined) <= max_length:
        return joined

    tail = TRUNCATION_MARKER + (BLOCK_SEPARATOR + footer if footer else "")
    room = max_length - len(tail)
    if room > 0:
        return body[:room].rstrip() + tail

    if max_length <= len(TRUNCATION_MARKER):
        return TRUNCATION_MARKER[:max_length]
    return joined[: max_length - len(TRUNCATION_MARKER)].rstrip() + TRUNCATION_MARKER


def render_digest(
    ranked: list[RankedItem],
    failures: list[FailureRecord],
    *,
    sources: list[str],
    generated_at: datetime,
    title: str = "Trend Watch",
    max_length: int = WEBHOOK_MAX_LENGTH,
    attempted: list[str] | None = None,
) -> str:
    """Render the ranked items into a single payload of at most *max_length* chars.

    Entries are added greedily in rank order while the payload plus the
    footer still fits; emission stops at the first entry that would not,
    so the emitted entries are always a prefix of *ranked*. If the header
    alone overflows, the header is cut and marked as truncated and the
    footer is kept.

    Raises EmptyDigestError when *ranked* is empty. *attempted* names the
    sources that were actually called and defaults to *sources*.
    """
    if not ranked:
        raise EmptyDigestError(
            attempted=sources if attempted is None else attempted,
            failed=[f.source_name for f in failures],
        )

    blocks = [render_header(title, generated_at, sources, failures)]
    emitted = 0
    for position, entry in enumerate(ranked, start=1):
        block = render_entry(position, entry)
        candidate = BLOCK_SEPARATOR.join([*blocks, block, FOOTER])
        if len(candidate) > max_length:
            break
        blocks.append(block)
        emitted += 1

    body = BLOCK_SEPARATOR.join(blocks)
    if len(body) + len(BLOCK_SEPARATOR) + len(FOOTER) > max_length:
        logger.warning("Digest header exceeds %d chars; truncating payload", max_length)
    payload = truncate_payload(body, max_length)

    logger.info(
        "Rendered %d of %d items (%d chars)", emitted, len(ranked), len(payload)
    )
    return payload
