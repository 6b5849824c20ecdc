"""
HTTP fetching for provider feeds and blog pages.

Requests go through a synchronous httpx client with a fixed identifying
User-Agent. Redirects are followed manually so the redirect budget is
explicit: each 3xx hop decrements it, and an exhausted budget raises
TooManyRedirects instead of returning the redirect response.
"""

from __future__ import annotations

import time
from urllib.parse import urljoin, urlparse

import httpx

from ..config import FetchConfig
from ..errors import (
    FetchTimeoutError,
    HttpStatusError,
    InvalidURLError,
    NetworkError,
    TooManyRedirects,
)


def fetch_text(
    url: str,
    cfg: FetchConfig,
    max_redirects: int | None = None,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Fetch a URL and return its body text.

    Network-level failures are retried ``cfg.retries`` times with a short
    linear backoff. Status and redirect errors are never retried.

    Args:
        url: http or https URL to fetch
        cfg: Fetch configuration (timeout, headers, retries)
        max_redirects: Redirect budget; defaults to ``cfg.max_redirects``
        transport: Optional httpx transport, used by tests

    Returns:
        The response body of the final 200 response

    Raises:
        InvalidURLError: If the URL scheme is not http/https
        TooManyRedirects: If more than max_redirects redirects are issued
        HttpStatusError: For any non-200 terminal response
        FetchTimeoutError: If the request times out
        NetworkError: For other connection-level failures
    """
    budget = cfg.max_redirects if max_redirects is None else max_redirects
    headers = {"User-Agent": cfg.user_agent, "Accept": cfg.accept}

    with httpx.Client(
        timeout=cfg.timeout_seconds,
        headers=headers,
        follow_redirects=False,
        trust_env=cfg.trust_env,
        transport=transport,
    ) as client:
        for attempt in range(cfg.retries + 1):
            try:
                return _fetch_with_redirects(client, url, budget)
            except NetworkError:
                if attempt >= cfg.retries:
                    raise
                # Linear backoff: 0.5s, 1.0s, 1.5s...
                time.sleep(0.5 * (attempt + 1))
    raise NetworkError("Fetch did not run", url)


def _fetch_with_redirects(client: httpx.Client, url: str, max_redirects: int) -> str:
    current = url
    remaining = max_redirects
    while True:
        _check_scheme(current)
        response = _get(client, current)
        location = response.headers.get("location")
        if 300 <= response.status_code < 400 and location:
            if remaining <= 0:
                raise TooManyRedirects("Too many redirects", current)
            current = urljoin(current, location)
            remaining -= 1
            continue
        if response.status_code != 200:
            raise HttpStatusError(response.status_code, current)
        return response.text


def _get(client: httpx.Client, url: str) -> httpx.Response:
    try:
        return client.get(url)
    except httpx.TimeoutException as exc:
        raise FetchTimeoutError("Request timeout", url) from exc
    except httpx.TransportError as exc:
        raise NetworkError(f"{type(exc).__name__}: {exc}", url) from exc


def _check_scheme(url: str) -> None:
    scheme = urlparse(url).scheme.lower()
    if scheme not in {"http", "https"}:
        raise InvalidURLError(f"Unsupported URL scheme: {scheme or '(none)'}", url)
