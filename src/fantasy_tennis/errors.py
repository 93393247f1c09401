"""Error taxonomy shared by the fetch client, orchestrators and web layer.

Every error that should reach an HTTP caller carries the status code it maps
to. Per-entity failures inside a batch are not raised at all; orchestrators
record them in their stats and carry on.
"""

from __future__ import annotations

from typing import Optional


class IngestionError(Exception):
    """Base class for errors surfaced to the caller of an orchestrator."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(IngestionError):
    """A request field is missing or malformed."""

    status_code = 400


class ConfigurationError(IngestionError):
    """A required setting (API key, auth URL) is not configured."""

    status_code = 500


class AuthError(IngestionError):
    status_code = 401


class AuthenticationRequired(AuthError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidToken(AuthError):
    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message)


class AdminRequired(AuthError):
    status_code = 403

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class UpstreamError(IngestionError):
    """The provider answered with a non-2xx, non-429 status (or not at all)."""

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, url: Optional[str] = None):
        if upstream_status is not None:
            message = f"{message} (upstream HTTP {upstream_status})"
        super().__init__(message)
        self.upstream_status = upstream_status
        self.url = url


class RateLimitedError(IngestionError):
    """The provider kept answering 429 after every retry attempt."""

    status_code = 429

    def __init__(self, url: Optional[str] = None, attempts: int = 0, retry_after: Optional[float] = None):
        message = "Upstream rate limit exceeded. Please wait a moment and try again."
        if attempts:
            message = f"{message} ({attempts} attempts)"
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.retry_after = retry_after
