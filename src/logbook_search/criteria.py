"""Assembly of normalized parameters into an immutable SearchCriteria."""

from __future__ import annotations

import logging
import re
import sys
from typing import Optional

from .config import SearchConfig
from .models import Page, SearchCriteria, SortSpec, TimeRange, check_time_range
from .params import NormalizedParameters

logger = logging.getLogger(__name__)

# Plain ASCII decimal digits only
_INTEGER_PATTERN = re.compile(r"[0-9]+")


def parse_non_negative_int(token: Optional[str]) -> Optional[int]:
    """Parse a pagination token; None when missing, malformed or negative."""
    if token is None:
        return None
    token = token.strip()
    if not _INTEGER_PATTERN.fullmatch(token):
        return None
    try:
        return int(token)
    except ValueError:
        # more digits than int() converts; saturate
        return sys.maxsize


def parse_page(from_token: Optional[str], size_token: Optional[str], config: SearchConfig) -> Page:
    """Build the result window, defaulting and clamping instead of rejecting."""
    size = parse_non_negative_int(size_token)
    if not size:
        size = config.default_size
    elif size > config.max_size:
        logger.debug("Clamping page size %d to %d", size, config.max_size)
        size = config.max_size

    from_ = parse_non_negative_int(from_token)
    if from_ is None:
        from_ = 0

    return Page(from_=from_, size=size)


def assemble_criteria(
    params: NormalizedParameters,
    time_range: TimeRange,
    sort: SortSpec,
    config: SearchConfig,
) -> SearchCriteria:
    """Combine resolved parts into one SearchCriteria.

    Raises:
        InvalidTimeRangeError: If the time range is inverted
    """
    check_time_range(time_range.start, time_range.end)

    return SearchCriteria(
        time_range=time_range,
        sort=sort,
        page=parse_page(params.from_, params.size, config),
        text_query=params.text,
        title=params.title,
        phrase=params.phrase,
        fuzzy=params.fuzzy,
        logbooks=params.logbooks,
        tags=params.tags,
        properties=params.properties,
        owner=params.owner,
        level=params.level,
        include_events=params.include_events,
    )
