"""Outbound HTTP GET shared by the source adapters."""

from __future__ import annotations

import logging

import httpx

from trendwatch.config import Config
from trendwatch.errors import SourceFetchError

logger = logging.getLogger(__name__)


def fetch_response(
    source: str,
    url: str,
    config: Config,
    *,
    params: dict | None = None,
    headers: dict | None = None,
) -> httpx.Response:
    """GET *url* with the client tag and timeout from *config*.

    Transport failures, timeouts and non-2xx responses are raised as
    SourceFetchError naming *source*.
    """
    request_headers = {"User-Agent": config.user_agent}
    if headers:
        request_headers.update(headers)

    try:
        response = httpx.get(
            url,
            params=params,
            headers=request_headers,
            timeout=config.fetch_timeout_seconds,
            follow_redirects=True,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise SourceFetchError(
            source, f"{status} {exc.response.reason_phrase}", status_code=status
        ) from exc
    except httpx.TimeoutException as exc:
        raise SourceFetchError(
            source, f"timed out after {config.fetch_timeout_seconds:g}s"
        ) from exc
    except httpx.HTTPError as exc:
        raise SourceFetchError(source, str(exc) or type(exc).__name__) from exc

    logger.debug("GET %s -> %d", url, response.status_code)
    return response


def fetch_json(
    source: str,
    url: str,
    config: Config,
    *,
    params: dict | None = None,
    headers: dict | None = None,
):
    """GET *url* and decode a JSON body, raising SourceFetchError if it is not JSON."""
    response = fetch_response(source, url, config, params=params, headers=headers)
    try:
        return response.json()
    except ValueError as exc:
        raise SourceFetchError(source, "response body is not valid JSON") from exc
