"""Month-grid calendar of club event occurrences."""

from __future__ import annotations

import calendar as _stdcal
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from .const import MONTH_NAMES, WEEKDAY_LABELS
from .occurrences import Occurrence

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarMonth:
    """A year + month pair (``month`` is 1-12)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be 1-12, got {self.month}")

    @classmethod
    def containing(cls, day: date) -> CalendarMonth:
        return cls(day.year, day.month)

    def previous(self) -> CalendarMonth:
        if self.month == 1:
            return CalendarMonth(self.year - 1, 12)
        return CalendarMonth(self.year, self.month - 1)

    def next(self) -> CalendarMonth:
        if self.month == 12:
            return CalendarMonth(self.year + 1, 1)
        return CalendarMonth(self.year, self.month + 1)

    @property
    def days_in_month(self) -> int:
        return _stdcal.monthrange(self.year, self.month)[1]

    @property
    def first_weekday(self) -> int:
        """Weekday of the 1st, 0 = Sunday."""
        # date.weekday() is 0 = Monday
        return (date(self.year, self.month, 1).weekday() + 1) % 7

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"


@dataclass(frozen=True)
class CalendarCell:
    """One numbered day in the grid."""

    day: int
    has_event: bool
    is_today: bool


@dataclass(frozen=True)
class CalendarGrid:
    """Everything a template needs to draw one month."""

    month: CalendarMonth
    leading_blanks: int
    cells: tuple[CalendarCell, ...]
    weekday_labels: tuple[str, ...] = WEEKDAY_LABELS

    @property
    def title(self) -> str:
        return self.month.title

    def weeks(self) -> list[list[CalendarCell | None]]:
        """Cells split into Sunday-first rows, padded with ``None``."""
        slots: list[CalendarCell | None] = [None] * self.leading_blanks
        slots.extend(self.cells)
        slots.extend([None] * (-len(slots) % 7))
        return [slots[i : i + 7] for i in range(0, len(slots), 7)]


def render_month(
    month: CalendarMonth,
    occurrences: Iterable[Occurrence],
    today: date,
) -> CalendarGrid:
    """Build the grid for ``month``, marking event days and today.

    Pure: the occurrences are only read.
    """
    event_days = {
        (occ.start_date.year, occ.start_date.month, occ.start_date.day)
        for occ in occurrences
    }
    cells = tuple(
        CalendarCell(
            day=day,
            has_event=(month.year, month.month, day) in event_days,
            is_today=date(month.year, month.month, day) == today,
        )
        for day in range(1, month.days_in_month + 1)
    )
    return CalendarGrid(month=month, leading_blanks=month.first_weekday, cells=cells)


def occurrences_on_day(
    occurrences: Iterable[Occurrence], day: date
) -> list[Occurrence]:
    """All occurrences starting on ``day``, time of day ignored."""
    return [occ for occ in occurrences if occ.start_date == day]


class EventCalendar:
    """Navigable month view over a list of occurrences.

    ``current_month`` only changes through :meth:`show_previous_month` and
    :meth:`show_next_month`. Replace the occurrences wholesale with
    :meth:`set_occurrences` after each fetch.
    """

    def __init__(
        self,
        occurrences: Sequence[Occurrence] = (),
        *,
        today: date | None = None,
        navigate: Callable[[str], None] | None = None,
    ) -> None:
        self._today = today
        self._occurrences: tuple[Occurrence, ...] = tuple(occurrences)
        self._navigate = navigate
        self._current_month = CalendarMonth.containing(self.today)

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def current_month(self) -> CalendarMonth:
        return self._current_month

    @property
    def occurrences(self) -> tuple[Occurrence, ...]:
        return self._occurrences

    def set_occurrences(self, occurrences: Iterable[Occurrence]) -> None:
        self._occurrences = tuple(occurrences)

    def show_previous_month(self) -> CalendarMonth:
        self._current_month = self._current_month.previous()
        return self._current_month

    def show_next_month(self) -> CalendarMonth:
        self._current_month = self._current_month.next()
        return self._current_month

    def render(self) -> CalendarGrid:
        return render_month(self._current_month, self._occurrences, self.today)

    def select_day(self, day: int) -> str | None:
        """Handle a click on ``day`` of the current month.

        Returns the detail path of the first occurrence that day and passes
        it to ``navigate``. A day with nothing on it (or one whose events
        vanished since the last render) returns ``None`` and does nothing.
        """
        month = self._current_month
        if not 1 <= day <= month.days_in_month:
            return None
        matches = occurrences_on_day(self._occurrences, date(month.year, month.month, day))
        if not matches:
            _LOGGER.debug("No occurrence on %s-%02d-%02d", month.year, month.month, day)
            return None
        path = matches[0].detail_path
        if self._navigate is not None:
            self._navigate(path)
        return path
