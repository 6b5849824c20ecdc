"""
Error taxonomy for the release watcher.

Fetch errors are recoverable: the runner converts them into "no findings"
for the source that raised them. Store errors split into a fatal load
failure and a per-append failure that only skips that single record.
"""

from __future__ import annotations


class ReleaseWatchError(Exception):
    """Base class for all release watcher errors."""


class FetchError(ReleaseWatchError):
    """Base class for failures while fetching a URL."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class InvalidURLError(FetchError):
    """The URL does not use the http or https scheme."""


class NetworkError(FetchError):
    """Connection-level failure (DNS, refused connection, reset)."""


class FetchTimeoutError(NetworkError):
    """The request did not complete within the configured timeout."""


class HttpStatusError(FetchError):
    """The terminal response had a status other than 200."""

    def __init__(self, status_code: int, url: str | None = None):
        super().__init__(f"HTTP {status_code}", url)
        self.status_code = status_code


class TooManyRedirects(FetchError):
    """The redirect budget was exhausted before reaching a final response."""


class StoreError(ReleaseWatchError):
    """Base class for release store failures."""


class StoreLoadError(StoreError):
    """The release store could not be read. Fatal for a run."""


class StoreSectionNotFound(StoreError):
    """The provider section targeted by an append does not exist."""

    def __init__(self, provider: str):
        super().__init__(f"Could not find {provider} section in release store")
        self.provider = provider
