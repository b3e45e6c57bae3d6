"""Errors raised by the club backend and weather provider clients."""

from __future__ import annotations


class ClubSiteError(Exception):
    """Base exception for all club site errors.

    The weather cache catches this to decide when to fall back to a stale
    reading, so anything a client raises for a failed call derives from it.
    """


class AuthenticationError(ClubSiteError):
    """Credentials were refused.

    Raised for a failed admin login, an admin-only call made without a
    token, a backend 401/403 (the token has expired), or an OpenWeatherMap
    401 for a bad or not yet activated API key.
    """


class ApiConnectionError(ClubSiteError):
    """The backend or weather provider could not be reached (DNS, refused, timeout)."""


class ApiResponseError(ClubSiteError):
    """A reachable server answered with an error.

    Covers non-2xx statuses and backend replies of the form
    ``{"success": false, "error": "Story not found"}``, where the message
    is the backend's own ``error`` text.

    Attributes:
        status_code: HTTP status code; ``None`` when the status was 2xx but
            the envelope reported failure.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiResponseError):
    """429 Too Many Requests, from the backend or the free weather tier.

    Attributes:
        retry_after: Seconds from the ``Retry-After`` header, if sent.
    """

    def __init__(
        self,
        message: str = "Rate limited",
        *,
        status_code: int = 429,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.retry_after = retry_after
