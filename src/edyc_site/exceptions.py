"""Errors raised by the site core outside the HTTP clients."""

from __future__ import annotations

from .api.exceptions import ClubSiteError


class ConfigError(ClubSiteError):
    """Environment settings failed validation."""


class WeatherUnavailableError(ClubSiteError):
    """Live weather failed and there was no cached reading to fall back on."""
