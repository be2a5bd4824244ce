"""Webhook delivery — post the rendered digest as a single message."""

from __future__ import annotations

import logging
import time

import httpx

from trendwatch.errors import DeliveryError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def post_message(
    webhook_url: str,
    content: str,
    *,
    max_retries: int = 3,
    timeout: float = 30,
) -> int:
    """Post *content* to the webhook and return the response status code.

    Transport errors, 429 and 5xx responses are retried with exponential
    backoff: 2^attempt seconds (1s, 2s, 4s, ...). Any other non-2xx
    response fails immediately. Raises DeliveryError with the last status
    and response body once delivery is given up.
    """
    last_status: int | None = None
    last_body = ""
    for attempt in range(max_retries):
        try:
            response = httpx.post(webhook_url, json={"content": content}, timeout=timeout)
        except httpx.HTTPError as exc:
            last_status = None
            last_body = str(exc) or type(exc).__name__
            logger.warning(
                "Webhook request failed (attempt %d/%d): %s",
                attempt + 1, max_retries, last_body,
            )
        else:
            if response.is_success:
                logger.info("Digest delivered (status %d)", response.status_code)
                return response.status_code
            last_status = response.status_code
            last_body = response.text
            if last_status not in _RETRYABLE_STATUS:
                raise DeliveryError(last_status, last_body)
            logger.warning(
                "Webhook returned %d (attempt %d/%d)",
                last_status, attempt + 1, max_retries,
            )

        if attempt < max_retries - 1:
            backoff = 2 ** attempt
            time.sleep(backoff)

    raise DeliveryError(last_status, last_body)
