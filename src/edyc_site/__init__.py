"""Core logic for the East Down Yacht Club website."""

from .api import ClubApiClient, OpenWeatherClient, __version__
from .calendar import CalendarCell, CalendarGrid, CalendarMonth, EventCalendar, render_month
from .config import Settings, load_settings
from .coordinator import EventsCoordinator
from .exceptions import ConfigError, WeatherUnavailableError
from .occurrences import Occurrence, expand_event, expand_events
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .weather import WeatherData, WeatherResult, WeatherService, async_load_weather

__all__ = [
    "__version__",
    "CalendarCell",
    "CalendarGrid",
    "CalendarMonth",
    "ClubApiClient",
    "ConfigError",
    "EventCalendar",
    "EventsCoordinator",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "Occurrence",
    "OpenWeatherClient",
    "Settings",
    "WeatherData",
    "WeatherResult",
    "WeatherService",
    "WeatherUnavailableError",
    "async_load_weather",
    "expand_event",
    "expand_events",
    "load_settings",
    "render_month",
]
