"""Time window filtering for Jira Estimate Metrics.

Restricts the analysis to issues updated within a trailing window ending at
an injected `now`.
"""

import datetime
import enum
import logging

from dateutil.relativedelta import relativedelta

from .errors import InvalidArgumentError
from .utils import to_utc

logger = logging.getLogger(__name__)


class TimeWindow(enum.Enum):
    """Trailing time windows, valued by their short alias."""

    ALL = "all"
    PAST_HOUR = "1h"
    PAST_DAY = "1d"
    PAST_WEEK = "1w"
    PAST_MONTH = "1m"
    PAST_3_MONTHS = "3m"

    @classmethod
    def parse(cls, value):
        """Return the window for an enum member, member name (any case) or
        short alias such as `1w`.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.ALL

        text = str(value).strip()
        for window in cls:
            if text.upper() == window.name or text.lower() == window.value:
                return window

        raise InvalidArgumentError(
            f"Unknown time window `{value}`. Expected one of: "
            f"{', '.join(w.value for w in cls)}"
        )

    @property
    def duration(self):
        """The look-back as a `timedelta`/`relativedelta`, or None for ALL."""
        return _DURATIONS[self]


_DURATIONS = {
    TimeWindow.ALL: None,
    TimeWindow.PAST_HOUR: datetime.timedelta(hours=1),
    TimeWindow.PAST_DAY: datetime.timedelta(days=1),
    TimeWindow.PAST_WEEK: datetime.timedelta(weeks=1),
    TimeWindow.PAST_MONTH: relativedelta(months=1),
    TimeWindow.PAST_3_MONTHS: relativedelta(months=3),
}


def window_cutoff(window, now):
    """Return the earliest `updated` time retained by `window`, or None if the
    window retains everything.

    `window` is a `TimeWindow` (or anything `TimeWindow.parse` accepts) or a
    custom non-negative `datetime.timedelta`.
    """
    if isinstance(window, datetime.timedelta):
        if window < datetime.timedelta(0):
            raise InvalidArgumentError(f"Time window must not be negative: {window}")
        duration = window
    else:
        duration = TimeWindow.parse(window).duration

    if duration is None:
        return None

    if now is None:
        raise InvalidArgumentError("`now` is required to apply a time window")

    return to_utc(now) - duration


def filter_by_window(records, window, now):
    """Return the records updated at or after `now - window`.

    `TimeWindow.ALL` returns every record, including those without a parseable
    timestamp; any other window excludes them.
    """
    cutoff = window_cutoff(window, now)

    if cutoff is None:
        return list(records)

    filtered = [
        record
        for record in records
        if record.updated is not None and record.updated >= cutoff
    ]
    logger.debug(
        "Time window %s (cutoff %s) kept %d records",
        window,
        cutoff.isoformat(),
        len(filtered),
    )
    return filtered


def describe_window(window):
    """Name a window for display, e.g. `PAST_WEEK` or `2 days, 0:00:00`."""
    if isinstance(window, datetime.timedelta):
        return str(window)
    return TimeWindow.parse(window).name
