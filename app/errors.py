"""
app/errors.py

Exception taxonomy for the visibility pipeline.

Only ``ConfigurationError`` is fatal. Every other error is caught at the
boundary where it originates and turned into a summary counter.
"""

from __future__ import annotations


class VisibilityError(RuntimeError):
    """
    Base class for pipeline errors.
    """


class ConfigurationError(VisibilityError, ValueError):
    """
    Raised when required inputs or settings are missing or invalid.
    """


class PageFetchError(VisibilityError):
    """
    Raised when a single API result page cannot be fetched or decoded.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class KeywordHarvestError(VisibilityError):
    """
    Raised when navigation or extraction for one keyword fails.
    """


class PublishError(VisibilityError):
    """
    Raised when a metrics row is rejected by the publish endpoint.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RateLimitedError(PublishError):
    """
    Raised when the publish endpoint answers with HTTP 429.
    """
