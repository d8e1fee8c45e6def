"""Free-text date/time fragments → calendar datetimes.

Listings omit the year, so one is supplied by the caller or taken from the
clock. Anything that cannot be parsed falls back to a fixed offset from now.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, time, timedelta
from typing import Callable

from stagelog.config import settings
from stagelog.errors import DateParseFallback

logger = logging.getLogger(__name__)

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_DATE_RE = re.compile(r"^\s*([A-Za-z]{3,})\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s*$", re.IGNORECASE)
_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AP])\.?M\.?\s*$", re.IGNORECASE)

DEFAULT_SHOW_TIME = time(19, 0)

# Past shows stay listed for a while; only a date further behind the clock
# than this is read as next year's
ROLL_FORWARD_GRACE = timedelta(days=182)


class DateNormalizer:
    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        fallback_days: int | None = None,
        roll_forward: bool | None = None,
    ):
        self.clock = clock
        self.fallback_days = settings.fallback_days if fallback_days is None else fallback_days
        self.roll_forward = settings.date_roll_forward if roll_forward is None else roll_forward

    def normalize(
        self,
        raw_date_fragment: str | None,
        raw_time_fragment: str | None,
        reference_year: int | None = None,
    ) -> datetime:
        """Resolve "<Month> <day>" plus "h:mm AM/PM" to a datetime.

        An explicit reference_year is used as given. Without one the clock's
        year applies and, when roll_forward is on, a date more than
        ROLL_FORWARD_GRACE in the past moves to next year. Failures never
        raise: they return fallback().
        """
        now = self.clock()
        try:
            year = reference_year if reference_year is not None else now.year
            parsed = self.parse(raw_date_fragment, raw_time_fragment, year)
            if reference_year is None and self.roll_forward and parsed < now - ROLL_FORWARD_GRACE:
                parsed = self.parse(raw_date_fragment, raw_time_fragment, year + 1)
            return parsed
        except DateParseFallback as e:
            logger.debug("Date fallback for %r %r: %s", raw_date_fragment, raw_time_fragment, e)
            return self.fallback(now)

    def fallback(self, now: datetime | None = None) -> datetime:
        """Default date for events whose date could not be read."""
        return (now or self.clock()) + timedelta(days=self.fallback_days)

    def parse(self, raw_date_fragment: str | None, raw_time_fragment: str | None, year: int) -> datetime:
        """Strict parse; raises DateParseFallback on any problem."""
        if not raw_date_fragment or not raw_date_fragment.strip():
            raise DateParseFallback("no date fragment")

        m = _DATE_RE.match(raw_date_fragment)
        if not m:
            raise DateParseFallback(f"unrecognised date {raw_date_fragment!r}")
        month = _MONTHS.get(m.group(1)[:3].lower())
        if month is None:
            raise DateParseFallback(f"unknown month {m.group(1)!r}")

        show_time = self._parse_time(raw_time_fragment)
        try:
            return datetime(year, month, int(m.group(2)), show_time.hour, show_time.minute)
        except ValueError as e:
            raise DateParseFallback(f"invalid date {raw_date_fragment!r} in {year}: {e}") from e

    def _parse_time(self, raw_time_fragment: str | None) -> time:
        if not raw_time_fragment or not raw_time_fragment.strip():
            return DEFAULT_SHOW_TIME
        m = _TIME_RE.match(raw_time_fragment)
        if not m:
            raise DateParseFallback(f"unrecognised time {raw_time_fragment!r}")
        hour, minute = int(m.group(1)), int(m.group(2))
        if not 1 <= hour <= 12 or minute > 59:
            raise DateParseFallback(f"invalid time {raw_time_fragment!r}")
        hour %= 12
        if m.group(3).upper() == "P":
            hour += 12
        return time(hour, minute)


def display_time(value: datetime) -> str:
    """Showing time as listed on the site, e.g. "7:00 PM"."""
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {'PM' if value.hour >= 12 else 'AM'}"
