"""Exception hierarchy for a page scan.

Each error carries the ``category`` string surfaced to API callers and the
HTTP status the endpoint answers with.  Anything that is not a ``ScanError``
is reported as ``internal``.
"""
from __future__ import annotations


class ScanError(Exception):
    category: str = "internal"
    http_status: int = 500


class InvalidURLError(ScanError):
    """The requested URL is missing or cannot be parsed. No request is made."""

    category = "invalid_url"
    http_status = 400


class TargetTypoError(ScanError):
    """Target answered with a client error that does not look like a block."""

    category = "typo"
    http_status = 400

    def __init__(self, status_code: int, url: str = "") -> None:
        super().__init__(f"HTTP {status_code} for {url}")
        self.status_code = status_code
        self.url = url


class TargetBlockedError(ScanError):
    """Target refused automated access (status code or block-page body)."""

    category = "blocked"
    http_status = 403

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class TargetUnavailableError(ScanError):
    """Transient failure: network error or a server error not tied to blocking."""


class RenderTimeoutError(ScanError):
    """Every rendering attempt ran out of time."""
