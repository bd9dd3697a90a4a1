"""Resolution of start/end tokens into a concrete time range.

A token is either an absolute timestamp ("2024-03-01 13:45:00.250", UTC) or
a relative expression meaning "now minus a duration" ("8 hours",
"last 2 days", "30min ago"). Both tokens of one request resolve against the
same reference instant.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import InvalidTimestampError
from .models import EPOCH, TimeRange, parse_timestamp, truncate_to_millis

UNITS: Mapping[str, str] = MappingProxyType({
    "s": "seconds",
    "sec": "seconds",
    "secs": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "m": "minutes",
    "min": "minutes",
    "mins": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hr": "hours",
    "hrs": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "wk": "weeks",
    "wks": "weeks",
    "week": "weeks",
    "weeks": "weeks",
})

_RELATIVE_PATTERN = re.compile(
    r"^(?:last\s+)?(?P<amount>[0-9]+)\s*(?P<unit>[a-z]+)(?:\s+ago)?$"
)

NOW_TOKEN = "now"


def parse_relative(token: str) -> Optional[timedelta]:
    """Parse a relative expression into the duration to subtract from now.

    Returns:
        The duration, or None if the token is not a relative expression
    """
    token = " ".join(token.strip().lower().split())
    if token == NOW_TOKEN:
        return timedelta(0)
    match = _RELATIVE_PATTERN.match(token)
    if match is None:
        return None
    unit = UNITS.get(match.group("unit"))
    if unit is None:
        return None
    try:
        return timedelta(**{unit: int(match.group("amount"))})
    except (OverflowError, ValueError):
        return None


def parse_time_token(token: str, now: datetime, parameter: str) -> datetime:
    """Resolve one start/end token.

    Args:
        token: Absolute timestamp or relative expression
        now: Reference instant for relative expressions
        parameter: "start" or "end", used in the error

    Raises:
        InvalidTimestampError: If the token is neither form
    """
    try:
        return parse_timestamp(token)
    except ValueError:
        pass

    delta = parse_relative(token)
    if delta is not None:
        try:
            return truncate_to_millis(now - delta)
        except OverflowError:
            pass

    raise InvalidTimestampError(
        f"Unable to parse {parameter} time {token!r}: expected "
        f"'YYYY-MM-DD HH:MM:SS.mmm' or a relative time such as '8 hours'",
        parameter=parameter,
    )


def resolve_time_range(
    start: Optional[str],
    end: Optional[str],
    now: datetime,
) -> TimeRange:
    """Resolve optional start/end tokens against a single reference instant.

    Missing start defaults to the epoch; missing end defaults to now.

    Raises:
        InvalidTimestampError: If a supplied token cannot be parsed
        InvalidTimeRangeError: If start resolves after end
    """
    now = truncate_to_millis(now)
    start_dt = parse_time_token(start, now, "start") if start else EPOCH
    end_dt = parse_time_token(end, now, "end") if end else now
    return TimeRange(start=start_dt, end=end_dt)
