"""Constants for the yacht club site core."""

from datetime import timedelta
from typing import Final

# Event occurrences
RECURRENCE_STEP: Final = timedelta(days=7)
DEFAULT_EVENT_TYPE: Final = "general"
DEFAULT_TITLE: Final = "Untitled Event"
DEFAULT_DESCRIPTION: Final = "No description available."
DEFAULT_LOCATION: Final = "Location TBD"
TIME_TBD: Final = "Time TBD"
EVENT_DETAIL_PATH: Final = "/events/{occurrence_id}"
UPCOMING_EVENTS_LIMIT: Final = 50

IMAGE_URL_TEMPLATE: Final = (
    "https://images.unsplash.com/photo-{photo_id}"
    "?ixlib=rb-4.0.3&auto=format&fit=crop&w=1000&q=80"
)
EVENT_TYPE_PHOTOS: Final = {
    "racing": "1565194481104-39d1ee1b8bcc",
    "training": "1534438097545-a2c22c57f2ad",
    "social": "1470337458703-46ad1756a187",
    "cruising": "1541789094913-f3809a8f3ba5",
}
DEFAULT_EVENT_PHOTO: Final = "1540946485063-a40da27545f8"

# en-US names; display strings must not depend on the process locale
MONTH_NAMES: Final = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
WEEKDAY_LABELS: Final = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# Weather
WEATHER_CACHE_PREFIX: Final = "edyc_weather_"
WEATHER_CACHE_DURATION: Final = timedelta(hours=12)
DEFAULT_WEATHER_TIMEOUT_SECONDS: Final = 10.0

# Strangford Lough, off the club slipway
DEFAULT_LAT: Final = 54.4692
DEFAULT_LON: Final = -5.6342

MPS_TO_KNOTS: Final = 1.94384
COMPASS_POINTS: Final = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)
COMPASS_SECTOR_DEGREES: Final = 22.5

DEMO_WEATHER_MESSAGE: Final = "Using demo data - API unavailable"
AUTH_REQUIRED_MESSAGE: Final = "Authentication required. Please log in to view events."
