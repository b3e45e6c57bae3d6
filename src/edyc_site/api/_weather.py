"""OpenWeatherMap current-conditions client."""

from __future__ import annotations

from typing import Any

import aiohttp

from .const import OPENWEATHER_BASE_URL, OPENWEATHER_CURRENT_ENDPOINT, OPENWEATHER_UNITS
from .exceptions import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    RateLimitError,
)


class OpenWeatherClient:
    """Thin async wrapper around the OpenWeatherMap ``/weather`` endpoint.

    Returns the provider's raw JSON; caching and unit conversion live in
    :class:`edyc_site.weather.WeatherService`.
    """

    def __init__(
        self,
        api_key: str,
        session: aiohttp.ClientSession | None = None,
        *,
        base_url: str = OPENWEATHER_BASE_URL,
    ) -> None:
        self._api_key = api_key
        self._owns_session = session is None
        self._session = session or aiohttp.ClientSession()
        self._base_url = base_url.rstrip("/")

    async def __aenter__(self) -> OpenWeatherClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.async_close()

    async def async_close(self) -> None:
        """Close the HTTP session if the client owns it."""
        if self._owns_session:
            await self._session.close()

    async def async_get_by_coordinates(self, lat: float, lon: float) -> dict[str, Any]:
        """Current conditions at a latitude/longitude."""
        return await self._request({"lat": str(lat), "lon": str(lon)})

    async def async_get_by_location(self, location: str) -> dict[str, Any]:
        """Current conditions for a place name (``"Killyleagh,GB"``)."""
        return await self._request({"q": location})

    async def _request(self, query: dict[str, str]) -> dict[str, Any]:
        """GET ``/weather`` with the API key and metric units.

        Raises:
            AuthenticationError: If the provider rejects the API key.
            RateLimitError: If the free-tier call quota is exhausted.
            ApiResponseError: On other non-2xx responses.
            ApiConnectionError: On network errors.
        """
        params = {**query, "appid": self._api_key, "units": OPENWEATHER_UNITS}
        try:
            async with self._session.get(
                f"{self._base_url}{OPENWEATHER_CURRENT_ENDPOINT}", params=params
            ) as resp:
                if resp.status == 401:
                    raise AuthenticationError("Weather API rejected the API key")
                if resp.status == 429:
                    retry_after = resp.headers.get("Retry-After")
                    raise RateLimitError(
                        "Weather API rate limit reached",
                        retry_after=float(retry_after) if retry_after else None,
                    )
                if resp.status >= 400:
                    body = await resp.text()
                    raise ApiResponseError(
                        f"Weather API error: HTTP {resp.status} - {body}",
                        status_code=resp.status,
                    )
                return await resp.json()
        except aiohttp.ClientError as err:
            raise ApiConnectionError(f"Connection error: {err}") from err
