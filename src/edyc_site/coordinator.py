"""Keeps the events page's event list and calendar occurrences current."""

from __future__ import annotations

import logging
from datetime import date

from .api import (
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
    ClubApiClient,
    EventRecord,
)
from .const import AUTH_REQUIRED_MESSAGE, UPCOMING_EVENTS_LIMIT
from .occurrences import Occurrence, expand_events

_LOGGER = logging.getLogger(__name__)


class EventsCoordinator:
    """Fetches upcoming events and rebuilds their occurrences.

    Every refresh replaces both lists wholesale; nothing is merged or
    patched. A failed refresh keeps the previous lists and records a
    message in ``last_error`` so the page stays usable.
    """

    def __init__(
        self,
        client: ClubApiClient,
        *,
        limit: int = UPCOMING_EVENTS_LIMIT,
        today: date | None = None,
    ) -> None:
        self._client = client
        self._limit = limit
        self._today = today
        self._events: tuple[EventRecord, ...] = ()
        self._occurrences: tuple[Occurrence, ...] = ()
        self.last_error: str | None = None

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def events(self) -> tuple[EventRecord, ...]:
        return self._events

    @property
    def occurrences(self) -> tuple[Occurrence, ...]:
        return self._occurrences

    async def async_refresh(self) -> bool:
        """Fetch events from today onwards and re-expand them.

        Returns True if the lists were replaced.
        """
        today = self.today
        try:
            events = await self._client.async_get_events(
                start_date=today, limit=self._limit
            )
        except AuthenticationError as err:
            _LOGGER.warning("Event fetch rejected: %s", err)
            self.last_error = AUTH_REQUIRED_MESSAGE
            return False
        except (ApiConnectionError, ApiResponseError) as err:
            _LOGGER.error("Failed to fetch events: %s", err)
            self.last_error = str(err)
            return False

        self._events = tuple(events)
        self._occurrences = tuple(expand_events(events, today=today))
        self.last_error = None
        _LOGGER.debug(
            "Expanded %d events into %d occurrences",
            len(self._events),
            len(self._occurrences),
        )
        return True
