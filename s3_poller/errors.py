"""Exception hierarchy for s3_poller."""

from __future__ import annotations


class S3PollerError(Exception):
    """Base exception for all s3_poller errors."""


class ConfigurationError(S3PollerError, ValueError):
    """Invalid constructor or call-time configuration."""


class InvalidListenerError(ConfigurationError, TypeError):
    """A listener passed for registration is not callable."""

    def __init__(self, listener: object) -> None:
        self.listener = listener
        super().__init__(f"listener is not callable: {listener!r}")


class FetchError(S3PollerError):
    """Remote fetch failed (network, not found, permission, malformed response)."""

    def __init__(
        self,
        message: str,
        bucket: str | None = None,
        key: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.bucket = bucket
        self.key = key
        self.status_code = status_code
        super().__init__(message)


class ParseError(S3PollerError):
    """Fetched body is not a valid UTF-8 JSON document."""


__all__ = [
    "S3PollerError",
    "ConfigurationError",
    "InvalidListenerError",
    "FetchError",
    "ParseError",
]
