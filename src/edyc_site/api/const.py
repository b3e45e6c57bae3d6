"""Constants for the club backend and weather provider clients."""

__version__ = "0.1.0"

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_API_TIMEOUT_SECONDS = 30.0

AUTH_LOGIN_ENDPOINT = "/auth/login"
AUTH_LOGOUT_ENDPOINT = "/auth/logout"
AUTH_PROFILE_ENDPOINT = "/auth/me"

EVENTS_ENDPOINT = "/events"
EVENT_DETAIL_ENDPOINT = "/events/{event_id}"

STORIES_ENDPOINT = "/stories"
STORY_DETAIL_ENDPOINT = "/stories/{story_id}"

EVENT_RACES_ENDPOINT = "/races/events/{event_id}"
RACE_RESULTS_ENDPOINT = "/races/{race_id}/results"

HEADER_AUTHORIZATION = "Authorization"

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
OPENWEATHER_CURRENT_ENDPOINT = "/weather"
OPENWEATHER_ICON_URL = "https://openweathermap.org/img/wn/{icon}@{size}.png"
OPENWEATHER_UNITS = "metric"
