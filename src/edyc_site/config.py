"""Runtime settings, read from the environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

import voluptuous as vol

from .api.const import DEFAULT_API_TIMEOUT_SECONDS, DEFAULT_API_URL
from .const import DEFAULT_WEATHER_TIMEOUT_SECONDS
from .exceptions import ConfigError
from .storage import JsonFileStore, KeyValueStore, MemoryStore

_LOGGER = logging.getLogger(__name__)

CONF_API_URL: Final = "EDYC_API_URL"
CONF_API_TIMEOUT: Final = "EDYC_API_TIMEOUT"
CONF_WEATHER_API_KEY: Final = "OPENWEATHER_API_KEY"
CONF_WEATHER_TIMEOUT: Final = "EDYC_WEATHER_TIMEOUT"
CONF_WEATHER_CACHE: Final = "EDYC_WEATHER_CACHE"
CONF_DEV_MODE: Final = "EDYC_DEV_MODE"

_POSITIVE_SECONDS = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))
_OPTIONAL_TEXT = vol.Any(None, vol.All(str, vol.Strip, vol.Length(min=1)), msg="must be non-empty")

SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_API_URL, default=DEFAULT_API_URL): vol.All(
            str, vol.Strip, vol.Url()
        ),
        vol.Optional(CONF_API_TIMEOUT, default=DEFAULT_API_TIMEOUT_SECONDS): _POSITIVE_SECONDS,
        vol.Optional(CONF_WEATHER_API_KEY, default=None): vol.Any(None, str),
        vol.Optional(
            CONF_WEATHER_TIMEOUT, default=DEFAULT_WEATHER_TIMEOUT_SECONDS
        ): _POSITIVE_SECONDS,
        vol.Optional(CONF_WEATHER_CACHE, default=None): _OPTIONAL_TEXT,
        vol.Optional(CONF_DEV_MODE, default=False): vol.Boolean(),
    },
    extra=vol.REMOVE_EXTRA,
)

_KNOWN_KEYS = frozenset(
    key.schema for key in SETTINGS_SCHEMA.schema  # type: ignore[attr-defined]
)


@dataclass(frozen=True)
class Settings:
    """Validated settings for one site process."""

    api_url: str = DEFAULT_API_URL
    api_timeout: float = DEFAULT_API_TIMEOUT_SECONDS
    weather_api_key: str | None = None
    weather_timeout: float = DEFAULT_WEATHER_TIMEOUT_SECONDS
    weather_cache_path: str | None = None
    dev_mode: bool = False

    def weather_store(self) -> KeyValueStore:
        """The store the weather cache should use."""
        if self.weather_cache_path:
            return JsonFileStore(self.weather_cache_path)
        return MemoryStore()


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Validate the relevant variables of ``environ`` (default ``os.environ``).

    Empty variables count as unset.

    Raises:
        ConfigError: If a variable is present but invalid.
    """
    source = os.environ if environ is None else environ
    raw: dict[str, Any] = {
        key: value
        for key, value in source.items()
        if key in _KNOWN_KEYS and value != ""
    }
    try:
        data = SETTINGS_SCHEMA(raw)
    except vol.Invalid as err:
        raise ConfigError(f"Invalid setting: {err}") from err

    settings = Settings(
        api_url=data[CONF_API_URL].rstrip("/"),
        api_timeout=data[CONF_API_TIMEOUT],
        weather_api_key=data[CONF_WEATHER_API_KEY] or None,
        weather_timeout=data[CONF_WEATHER_TIMEOUT],
        weather_cache_path=data[CONF_WEATHER_CACHE],
        dev_mode=data[CONF_DEV_MODE],
    )
    if settings.weather_api_key is None:
        _LOGGER.info("%s not set; weather will use demo data", CONF_WEATHER_API_KEY)
    return settings

