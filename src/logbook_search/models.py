"""Data models for search criteria, sort orders and compiled backend queries."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import INVALID_TIME_RANGE_MESSAGE, InvalidTimeRangeError

# Absolute timestamps: "2024-03-01 13:45:00.250", always three fractional digits
MILLI_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
_MILLI_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}$")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DEFAULT_SORT_FIELD = "createdDate"


class SortOrder(Enum):
    """Canonical sort order after synonym resolution."""
    ASC = "asc"
    DESC = "desc"


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def truncate_to_millis(dt: datetime) -> datetime:
    """Drop sub-millisecond precision, treating naive values as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def format_timestamp(dt: datetime) -> str:
    """Format datetime in MILLI_FORMAT (UTC, millisecond precision)."""
    dt = truncate_to_millis(dt).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S.") + f"{dt.microsecond // 1000:03d}"


def parse_timestamp(s: str) -> datetime:
    """Parse a MILLI_FORMAT timestamp string as UTC.

    Raises:
        ValueError: If the string is not in MILLI_FORMAT or names an invalid date
    """
    s = s.strip()
    if not _MILLI_PATTERN.match(s):
        raise ValueError(f"Timestamp not in format 'YYYY-MM-DD HH:MM:SS.mmm': {s!r}")
    return datetime.strptime(s, MILLI_FORMAT).replace(tzinfo=timezone.utc)


def to_epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return (truncate_to_millis(dt) - EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval [start, end) at millisecond resolution."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", truncate_to_millis(self.start))
        object.__setattr__(self, "end", truncate_to_millis(self.end))
        check_time_range(self.start, self.end)


def check_time_range(start: datetime, end: datetime) -> None:
    """Raise InvalidTimeRangeError unless start <= end."""
    if start > end:
        raise InvalidTimeRangeError(
            f"{INVALID_TIME_RANGE_MESSAGE}: start {format_timestamp(start)} "
            f"is after end {format_timestamp(end)}",
            parameter="start",
        )


@dataclass(frozen=True)
class SortSpec:
    """A single sort key."""
    field: str = DEFAULT_SORT_FIELD
    order: SortOrder = SortOrder.DESC


@dataclass(frozen=True)
class Page:
    """Result window: offset and page size."""
    from_: int = 0
    size: int = 100

    def __post_init__(self) -> None:
        if self.from_ < 0:
            raise ValueError(f"Page offset must be non-negative: {self.from_}")
        if self.size < 1:
            raise ValueError(f"Page size must be positive: {self.size}")


@dataclass(frozen=True)
class SearchCriteria:
    """Validated, canonical search request.

    Constructed once per request by the criteria assembler. Collections are
    frozen on construction so an instance can be shared freely.
    """
    time_range: TimeRange
    sort: SortSpec = field(default_factory=SortSpec)
    page: Page = field(default_factory=Page)

    # Text matching
    text_query: Optional[str] = None
    title: Optional[str] = None
    phrase: Optional[str] = None
    fuzzy: bool = False

    # Structural filters
    logbooks: frozenset[str] = frozenset()
    tags: frozenset[str] = frozenset()
    properties: Mapping[str, frozenset[str]] = field(default_factory=dict)
    owner: Optional[str] = None
    level: Optional[str] = None

    include_events: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "logbooks", frozenset(self.logbooks))
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(
            self,
            "properties",
            MappingProxyType({
                name: frozenset(values)
                for name, values in self.properties.items()
                if values
            }),
        )
        if not isinstance(self.time_range, TimeRange):
            raise TypeError("time_range must be a TimeRange")
        check_time_range(self.time_range.start, self.time_range.end)

    def __hash__(self) -> int:
        # properties is a read-only mapping; hash its items
        return hash((
            self.time_range,
            self.sort,
            self.page,
            self.text_query,
            self.title,
            self.phrase,
            self.fuzzy,
            self.logbooks,
            self.tags,
            frozenset(self.properties.items()),
            self.owner,
            self.level,
            self.include_events,
        ))

    def to_dict(self) -> dict:
        """Convert criteria to dictionary for JSON serialization."""
        return {
            "text_query": self.text_query,
            "title": self.title,
            "phrase": self.phrase,
            "fuzzy": self.fuzzy,
            "logbooks": sorted(self.logbooks),
            "tags": sorted(self.tags),
            "properties": {
                name: sorted(values)
                for name, values in sorted(self.properties.items())
            },
            "owner": self.owner,
            "level": self.level,
            "start": format_timestamp(self.time_range.start),
            "end": format_timestamp(self.time_range.end),
            "include_events": self.include_events,
            "sort": {"field": self.sort.field, "order": self.sort.order.value},
            "from": self.page.from_,
            "size": self.page.size,
        }


@dataclass(frozen=True)
class BackendQuery:
    """Compiled Elasticsearch request, ready for the search client."""
    index: str
    query: dict[str, Any]
    sort: list[dict[str, Any]]
    from_: int
    size: int

    def to_body(self) -> dict[str, Any]:
        """Request body as sent to the search endpoint."""
        return {
            "query": copy.deepcopy(self.query),
            "sort": copy.deepcopy(self.sort),
            "from": self.from_,
            "size": self.size,
        }
