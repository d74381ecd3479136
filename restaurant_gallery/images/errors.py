"""
Failure taxonomy for the image pipeline.

Provider adapters raise these at the point of failure so the chain can route
on the exception type instead of inspecting error messages.
"""
from __future__ import annotations


class ImageSearchError(Exception):
    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        query: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.query = query
        self.status_code = status_code

    def log_context(self) -> dict:
        return {
            "provider": self.provider,
            "kind": self.kind,
            "query": self.query,
            "status_code": self.status_code,
        }


class ConfigMissing(ImageSearchError):
    """Credentials are absent; the provider is skipped without a network call."""

    kind = "config_missing"


class QuotaExceeded(ImageSearchError):
    """The provider reported a rate or quota limit (HTTP 429 or equivalent)."""

    kind = "quota_exceeded"


class NoResults(ImageSearchError):
    """The call succeeded but produced zero usable items."""

    kind = "no_results"


class TransportError(ImageSearchError):
    """Network failure, unexpected HTTP status, or an unparseable payload."""

    kind = "transport_error"


class RateGoverned(ImageSearchError):
    """Denied by the local rate governor before any network attempt."""

    kind = "rate_governed"
