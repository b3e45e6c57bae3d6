"""Current weather on the lough, cached for twelve hours.

Readings are kept in a :class:`~edyc_site.storage.KeyValueStore` under
``edyc_weather_*`` keys, one per rounded coordinate pair or normalized
place name. Every lookup first sweeps expired entries out of the store.
When the provider is down the last reading for the key is served even if
it has expired; with no API key configured the service hands out a fixed
demo reading instead of calling out at all.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

import aiohttp

from .api import OpenWeatherClient
from .api.const import OPENWEATHER_ICON_URL
from .api.exceptions import ClubSiteError
from .const import (
    COMPASS_POINTS,
    COMPASS_SECTOR_DEGREES,
    DEFAULT_LAT,
    DEFAULT_LON,
    DEFAULT_WEATHER_TIMEOUT_SECONDS,
    DEMO_WEATHER_MESSAGE,
    MPS_TO_KNOTS,
    WEATHER_CACHE_DURATION,
    WEATHER_CACHE_PREFIX,
)
from .exceptions import WeatherUnavailableError
from .storage import KeyValueStore

_LOGGER = logging.getLogger(__name__)

CACHE_DURATION_MS = int(WEATHER_CACHE_DURATION.total_seconds() * 1000)

_LOCATION_KEY_RE = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class WeatherData:
    """Current conditions in the units shown on the site."""

    temperature: int  # °C
    description: str
    wind_speed: int  # knots
    wind_direction: str  # 16-point compass
    wind_direction_degrees: float
    humidity: int  # %
    visibility: int  # km
    feels_like: int  # °C
    pressure: int  # hPa
    icon: str
    location: str
    last_updated: str  # ISO 8601

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WeatherData:
        return cls(**{name: data[name] for name in cls.__dataclass_fields__})


@dataclass(frozen=True)
class CacheEntry:
    """A stored reading; timestamps are Unix milliseconds."""

    data: WeatherData
    timestamp: int
    expires_at: int

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expires_at

    def to_json(self) -> str:
        return json.dumps(
            {
                "data": self.data.to_dict(),
                "timestamp": self.timestamp,
                "expires_at": self.expires_at,
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> CacheEntry:
        """Parse a stored entry.

        Raises:
            ValueError: If the entry is not valid JSON of the right shape.
        """
        try:
            payload = json.loads(raw)
            return cls(
                data=WeatherData.from_dict(payload["data"]),
                timestamp=int(payload["timestamp"]),
                expires_at=int(payload["expires_at"]),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as err:
            raise ValueError(f"Malformed weather cache entry: {err}") from err


@dataclass(frozen=True)
class CacheInfo:
    """Debug view of one cache slot."""

    key: str
    location: str
    expires_at: datetime
    is_expired: bool


# --------------------------------------------------------------------------- #
#  Unit conversion
# --------------------------------------------------------------------------- #


def _round_half_up(value: float) -> int:
    """Round .5 towards +infinity, like the site's JavaScript did."""
    return math.floor(value + 0.5)


def wind_direction(degrees: float) -> str:
    """Map a bearing to a 16-point compass name (0 → N, 225 → SW)."""
    return COMPASS_POINTS[_round_half_up(degrees / COMPASS_SECTOR_DEGREES) % 16]


def mps_to_knots(mps: float) -> int:
    return _round_half_up(mps * MPS_TO_KNOTS)


def metres_to_km(metres: float) -> int:
    return _round_half_up(metres / 1000)


def transform_api_response(data: dict[str, Any], last_updated: str) -> WeatherData:
    """Convert an OpenWeatherMap ``/weather`` payload (metric units).

    Raises:
        KeyError, IndexError, TypeError: If the payload is missing fields.
    """
    main = data["main"]
    wind = data["wind"]
    condition = data["weather"][0]
    degrees = wind.get("deg", 0)
    return WeatherData(
        temperature=_round_half_up(main["temp"]),
        description=condition["description"],
        wind_speed=mps_to_knots(wind["speed"]),
        wind_direction=wind_direction(degrees),
        wind_direction_degrees=degrees,
        humidity=main["humidity"],
        visibility=metres_to_km(data.get("visibility", 0)),
        feels_like=_round_half_up(main["feels_like"]),
        pressure=main["pressure"],
        icon=condition["icon"],
        location=data.get("name", ""),
        last_updated=last_updated,
    )


# --------------------------------------------------------------------------- #
#  Service
# --------------------------------------------------------------------------- #


class WeatherService:
    """Cached access to current weather.

    Usage::

        service = WeatherService(JsonFileStore("weather.json"), api_key=key)
        weather = await service.async_get_current_weather()

    Without ``api_key`` (and without an explicit ``client``) every lookup
    returns :meth:`get_mock_weather_data`, cached like a real reading.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        api_key: str | None = None,
        client: OpenWeatherClient | None = None,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_WEATHER_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._owns_client = client is None and bool(api_key)
        if client is None and api_key:
            client = OpenWeatherClient(api_key, session)
        self._client = client
        self._timeout = timeout
        self._clock = clock

    @property
    def configured(self) -> bool:
        """Whether live data can be fetched at all."""
        return self._client is not None

    async def async_close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.async_close()

    # ------------------------------------------------------------------ #
    #  Lookups
    # ------------------------------------------------------------------ #

    async def async_get_current_weather(
        self,
        lat: float | None = None,
        lon: float | None = None,
        *,
        force_refresh: bool = False,
    ) -> WeatherData:
        """Weather at a coordinate pair, defaulting to the club.

        Raises:
            WeatherUnavailableError: If the provider failed and nothing was
                cached for these coordinates.
        """
        latitude = DEFAULT_LAT if lat is None else lat
        longitude = DEFAULT_LON if lon is None else lon
        return await self._async_lookup(
            self.coordinates_cache_key(latitude, longitude),
            lambda client: client.async_get_by_coordinates(latitude, longitude),
            force_refresh=force_refresh,
        )

    async def async_get_weather_by_location(
        self,
        location: str,
        *,
        force_refresh: bool = False,
    ) -> WeatherData:
        """Weather for a place name.

        Raises:
            WeatherUnavailableError: If the provider failed and nothing was
                cached for this place.
        """
        return await self._async_lookup(
            self.location_cache_key(location),
            lambda client: client.async_get_by_location(location),
            force_refresh=force_refresh,
        )

    def get_mock_weather_data(self) -> WeatherData:
        """A plausible Strangford Lough reading for demos and development."""
        return WeatherData(
            temperature=14,
            description="partly cloudy",
            wind_speed=12,
            wind_direction="SW",
            wind_direction_degrees=225,
            humidity=76,
            visibility=10,
            feels_like=12,
            pressure=1013,
            icon="02d",
            location="Strangford Lough",
            last_updated=self._now_iso(),
        )

    @staticmethod
    def weather_icon_url(icon: str, size: str = "2x") -> str:
        """Provider icon URL; ``size`` is ``"2x"`` or ``"4x"``."""
        return OPENWEATHER_ICON_URL.format(icon=icon, size=size)

    # ------------------------------------------------------------------ #
    #  Cache management
    # ------------------------------------------------------------------ #

    @staticmethod
    def coordinates_cache_key(lat: float, lon: float) -> str:
        return f"{WEATHER_CACHE_PREFIX}{lat:.4f}_{lon:.4f}"

    @staticmethod
    def location_cache_key(location: str) -> str:
        return f"{WEATHER_CACHE_PREFIX}location_{_LOCATION_KEY_RE.sub('_', location.lower())}"

    def has_fresh_entry(self, cache_key: str) -> bool:
        """Whether a lookup for ``cache_key`` would be served from cache."""
        entry = self._read_entry(cache_key)
        return entry is not None and entry.is_valid(self._now_ms())

    def clear_weather_cache(self) -> int:
        """Remove every weather entry; returns how many were removed."""
        keys = self._weather_keys()
        for key in keys:
            self._store.remove_item(key)
        _LOGGER.info("Cleared %d weather cache entries", len(keys))
        return len(keys)

    def get_cache_info(self) -> list[CacheInfo]:
        """Describe every weather entry, unreadable ones as expired."""
        now = self._now_ms()
        info: list[CacheInfo] = []
        for key in self._weather_keys():
            raw = self._store.get_item(key)
            try:
                entry = CacheEntry.from_json(raw or "")
            except ValueError:
                info.append(
                    CacheInfo(
                        key=key,
                        location="Unknown",
                        expires_at=_from_ms(now),
                        is_expired=True,
                    )
                )
                continue
            info.append(
                CacheInfo(
                    key=key,
                    location=entry.data.location,
                    expires_at=_from_ms(entry.expires_at),
                    is_expired=not entry.is_valid(now),
                )
            )
        return info

    # ------------------------------------------------------------------ #
    #  Internals
    # ------------------------------------------------------------------ #

    async def _async_lookup(
        self,
        cache_key: str,
        fetch: Callable[[OpenWeatherClient], Awaitable[dict[str, Any]]],
        *,
        force_refresh: bool,
    ) -> WeatherData:
        # Held back from the sweep so it can still serve as a stale fallback
        previous = self._read_entry(cache_key)
        self._clear_expired_cache()

        if not force_refresh and previous is not None and previous.is_valid(self._now_ms()):
            _LOGGER.debug("Using cached weather data for %s", cache_key)
            return previous.data

        if self._client is None:
            _LOGGER.warning("No OpenWeather API key configured, using mock data")
            mock = self.get_mock_weather_data()
            self._write_entry(cache_key, mock)
            return mock

        _LOGGER.info("Fetching fresh weather data for %s", cache_key)
        try:
            raw = await asyncio.wait_for(fetch(self._client), timeout=self._timeout)
            weather = transform_api_response(raw, self._now_iso())
        except TimeoutError as err:
            return self._fallback(cache_key, previous, "request timed out", err)
        except ClubSiteError as err:
            return self._fallback(cache_key, previous, str(err), err)
        except (KeyError, IndexError, TypeError, ValueError) as err:
            return self._fallback(cache_key, previous, f"malformed payload ({err!r})", err)

        self._write_entry(cache_key, weather)
        return weather

    def _fallback(
        self,
        cache_key: str,
        previous: CacheEntry | None,
        reason: str,
        err: BaseException,
    ) -> WeatherData:
        _LOGGER.error("Failed to fetch weather data for %s: %s", cache_key, reason)
        if previous is not None:
            _LOGGER.warning("Weather API failed, using stale cached data for %s", cache_key)
            return previous.data
        raise WeatherUnavailableError(f"Weather unavailable: {reason}") from err

    def _read_entry(self, cache_key: str) -> CacheEntry | None:
        raw = self._store.get_item(cache_key)
        if raw is None:
            return None
        try:
            return CacheEntry.from_json(raw)
        except ValueError:
            _LOGGER.warning("Removing unreadable weather cache entry %s", cache_key)
            self._store.remove_item(cache_key)
            return None

    def _write_entry(self, cache_key: str, data: WeatherData) -> None:
        now = self._now_ms()
        entry = CacheEntry(data=data, timestamp=now, expires_at=now + CACHE_DURATION_MS)
        self._store.set_item(cache_key, entry.to_json())
        _LOGGER.info("Weather data for %s cached for 12 hours", cache_key)

    def _clear_expired_cache(self) -> None:
        now = self._now_ms()
        for key in self._weather_keys():
            raw = self._store.get_item(key)
            if raw is None:
                continue
            try:
                expired = not CacheEntry.from_json(raw).is_valid(now)
            except ValueError:
                expired = True
            if expired:
                self._store.remove_item(key)
                _LOGGER.debug("Removed expired cache: %s", key)

    def _weather_keys(self) -> list[str]:
        return [k for k in self._store.keys() if k.startswith(WEATHER_CACHE_PREFIX)]

    def now(self) -> datetime:
        """Current time according to the service clock, in UTC."""
        return _from_ms(self._now_ms())

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _now_iso(self) -> str:
        return _from_ms(self._now_ms()).isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        )


def _from_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


# --------------------------------------------------------------------------- #
#  Widget-level loading
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class WeatherResult:
    """What the weather widget shows after a load."""

    weather: WeatherData | None
    error: str | None = None
    is_cached: bool = False
    last_updated: datetime | None = None


async def async_load_weather(
    service: WeatherService,
    *,
    lat: float | None = None,
    lon: float | None = None,
    location: str | None = None,
    force_refresh: bool = False,
    use_mock_on_error: bool = False,
) -> WeatherResult:
    """Load weather for the widget without ever raising for weather errors.

    ``location`` wins over coordinates. When the service gives up, development
    builds (``use_mock_on_error``) show the demo reading with a notice;
    production shows the error and no reading.
    """
    if location:
        cache_key = service.location_cache_key(location)
    else:
        cache_key = service.coordinates_cache_key(
            DEFAULT_LAT if lat is None else lat,
            DEFAULT_LON if lon is None else lon,
        )
    was_cached = not force_refresh and service.has_fresh_entry(cache_key)

    try:
        if location:
            weather = await service.async_get_weather_by_location(
                location, force_refresh=force_refresh
            )
        else:
            weather = await service.async_get_current_weather(
                lat, lon, force_refresh=force_refresh
            )
    except WeatherUnavailableError as err:
        _LOGGER.error("Weather fetch error: %s", err)
        if use_mock_on_error:
            _LOGGER.warning("Using mock weather data due to API error")
            return WeatherResult(
                weather=service.get_mock_weather_data(),
                error=DEMO_WEATHER_MESSAGE,
                last_updated=service.now(),
            )
        return WeatherResult(weather=None, error=str(err))

    return WeatherResult(
        weather=weather,
        is_cached=was_cached,
        last_updated=service.now(),
    )
