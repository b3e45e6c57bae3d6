"""Expansion of club events into dated calendar occurrences.

A backend event with an end date is a weekly series (Wednesday evening
racing, winter frostbites, ...). Each week between the start and end date
becomes one occurrence. Occurrences are a derived view: rebuild them from
the event records after every fetch, never edit them in place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

from dateutil import parser as dtparser

from .api._serialization import decamelize
from .api.models import EventRecord
from .const import (
    DEFAULT_DESCRIPTION,
    DEFAULT_EVENT_PHOTO,
    DEFAULT_EVENT_TYPE,
    DEFAULT_LOCATION,
    DEFAULT_TITLE,
    EVENT_DETAIL_PATH,
    EVENT_TYPE_PHOTOS,
    IMAGE_URL_TEMPLATE,
    MONTH_NAMES,
    RECURRENCE_STEP,
    TIME_TBD,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Occurrence:
    """One dated instance of a club event, ready for display."""

    id: str
    event_id: str
    title: str
    description: str
    event_type: str
    date: str  # "April 3, 2024"
    start_date: date
    end_date: date
    time: str  # "6:30 PM" or "Time TBD"
    location: str
    category: str
    image: str
    has_results: bool = False

    @property
    def detail_path(self) -> str:
        """Route of this occurrence's detail page."""
        return EVENT_DETAIL_PATH.format(occurrence_id=self.id)


def expand_event(event: Any, *, today: date | None = None) -> list[Occurrence]:
    """Turn one event record into its occurrences.

    Accepts an :class:`EventRecord` or a raw backend mapping in either key
    style (``start_date`` or ``startDate``).
    Never raises on bad field values: an unparseable start date falls back to
    ``today`` and an unparseable start time becomes ``"Time TBD"``. Returns an
    empty list only when ``event`` is not an event at all.

    A range whose end is not after its start (same day, or reversed) yields
    a single occurrence rather than none.
    """
    if isinstance(event, Mapping):
        event = EventRecord.from_api_response(decamelize(dict(event)))
    elif not isinstance(event, EventRecord):
        return []

    event_type = event.event_type
    if not isinstance(event_type, str) or not event_type:
        event_type = DEFAULT_EVENT_TYPE

    start = _parse_date(event.start_date)
    if start is None:
        if event.start_date:
            _LOGGER.debug("Event %s has unparseable start date %r", event.id, event.start_date)
        start = today or date.today()
    end = _parse_date(event.end_date)

    base = {
        "event_id": event.id,
        "title": event.title or DEFAULT_TITLE,
        "description": event.description or DEFAULT_DESCRIPTION,
        "event_type": event_type,
        "time": format_time(event.start_time),
        "location": event.location or DEFAULT_LOCATION,
        "category": event_type[:1].upper() + event_type[1:],
        "image": event_image_url(event_type),
    }

    if end is None or end <= start:
        return [
            Occurrence(
                id=event.id,
                date=format_long_date(start),
                start_date=start,
                end_date=start,
                **base,
            )
        ]

    occurrences: list[Occurrence] = []
    cursor = start
    while cursor <= end:
        occurrences.append(
            Occurrence(
                id=f"{event.id}-{cursor.isoformat()}",
                date=format_long_date(cursor),
                start_date=cursor,
                end_date=cursor,
                **base,
            )
        )
        cursor += RECURRENCE_STEP
    return occurrences


def expand_events(
    events: Iterable[Any], *, today: date | None = None
) -> list[Occurrence]:
    """Expand every event and flatten, preserving backend order."""
    occurrences: list[Occurrence] = []
    for event in events:
        occurrences.extend(expand_event(event, today=today))
    return occurrences


def todays_occurrences(
    occurrences: Iterable[Occurrence], today: date | None = None
) -> list[Occurrence]:
    """Occurrences that fall on ``today`` (the "happening today" strip)."""
    today = today or date.today()
    return [occ for occ in occurrences if occ.start_date == today]


def upcoming_occurrences(
    occurrences: Iterable[Occurrence],
    today: date | None = None,
    limit: int | None = None,
) -> list[Occurrence]:
    """Occurrences on or after ``today``, soonest first."""
    today = today or date.today()
    upcoming = sorted(
        (occ for occ in occurrences if occ.start_date >= today),
        key=lambda occ: occ.start_date,
    )
    return upcoming if limit is None else upcoming[:limit]


# --------------------------------------------------------------------------- #
#  Formatting helpers
# --------------------------------------------------------------------------- #


def format_long_date(value: date) -> str:
    """``date(2023, 9, 16)`` → ``"September 16, 2023"``."""
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"


def format_time(value: Any) -> str:
    """Format a start time as ``"6:30 PM"``; anything unparseable is TBD.

    Accepts ``time``/``datetime`` objects, ISO timestamps
    (``"2024-04-03T18:30:00Z"``) and bare clock strings (``"18:30"``).
    A timestamp is shown in its own offset, not converted.
    """
    if isinstance(value, datetime):
        parsed: time | None = value.time()
    elif isinstance(value, time):
        parsed = value
    elif isinstance(value, str) and value.strip():
        moment = _parse_datetime(value)
        parsed = moment.time() if moment is not None else None
    else:
        parsed = None

    if parsed is None:
        if value:
            _LOGGER.debug("Failed to parse start time: %r", value)
        return TIME_TBD

    hour = parsed.hour % 12 or 12
    suffix = "AM" if parsed.hour < 12 else "PM"
    return f"{hour}:{parsed.minute:02d} {suffix}"


def event_image_url(event_type: str) -> str:
    """Placeholder photo for an event type."""
    photo_id = EVENT_TYPE_PHOTOS.get(event_type, DEFAULT_EVENT_PHOTO)
    return IMAGE_URL_TEMPLATE.format(photo_id=photo_id)


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    moment = _parse_datetime(value)
    return moment.date() if moment is not None else None


def _parse_datetime(value: str) -> datetime | None:
    """ISO 8601 first, then dateutil's fuzzier parser."""
    text = value.strip()
    try:
        return dtparser.isoparse(text)
    except (ValueError, OverflowError):
        pass
    try:
        return dtparser.parse(text)
    except (ValueError, OverflowError):
        return None
