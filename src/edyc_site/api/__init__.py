"""Async clients for the club backend and the weather provider."""

from .const import __version__
from ._client import ClubApiClient
from ._weather import OpenWeatherClient
from .exceptions import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    ClubSiteError,
    RateLimitError,
)
from .models import (
    EventMutation,
    EventRecord,
    Pagination,
    Race,
    RaceMutation,
    RaceResult,
    Story,
    StoryMutation,
    User,
    YachtClass,
)

__all__ = [
    "__version__",
    "ClubApiClient",
    "OpenWeatherClient",
    "ApiConnectionError",
    "ApiResponseError",
    "AuthenticationError",
    "ClubSiteError",
    "RateLimitError",
    "EventMutation",
    "EventRecord",
    "Pagination",
    "Race",
    "RaceMutation",
    "RaceResult",
    "Story",
    "StoryMutation",
    "User",
    "YachtClass",
]
