"""Translation of SearchCriteria into an Elasticsearch query.

Structural filters go into the bool ``filter`` context (mandatory, unscored);
text matches go into ``must`` so they contribute relevance. Values within one
filter kind are OR-combined through ``terms``; kinds are AND-combined.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import SearchConfig
from .errors import QueryCompilationError
from .models import (
    BackendQuery,
    Page,
    SearchCriteria,
    SortOrder,
    SortSpec,
    TimeRange,
    to_epoch_millis,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = ["title", "description"]


def _nested_terms(path: str, field: str, values: frozenset[str]) -> dict[str, Any]:
    return {
        "nested": {
            "path": path,
            "query": {"terms": {f"{path}.{field}": sorted(values)}},
        }
    }


def _property_clause(name: str, values: frozenset[str]) -> dict[str, Any]:
    return {
        "nested": {
            "path": "properties",
            "query": {
                "bool": {
                    "filter": [
                        {"term": {"properties.name": name}},
                        {"terms": {"properties.value": sorted(values)}},
                    ]
                }
            },
        }
    }


def _time_range_clause(time_range: TimeRange, field: str, include_events: bool) -> dict[str, Any]:
    bounds = {
        "gte": to_epoch_millis(time_range.start),
        "lt": to_epoch_millis(time_range.end),
        "format": "epoch_millis",
    }
    created = {"range": {field: dict(bounds)}}
    if not include_events:
        return created
    return {
        "bool": {
            "should": [
                created,
                {
                    "nested": {
                        "path": "events",
                        "query": {"range": {"events.instant": dict(bounds)}},
                    }
                },
            ],
            "minimum_should_match": 1,
        }
    }


def check_criteria(criteria: SearchCriteria, config: SearchConfig) -> None:
    """Verify the invariants the assembler promises.

    Raises:
        QueryCompilationError: On any violation
    """
    problems = []
    if not isinstance(criteria, SearchCriteria):
        raise QueryCompilationError(f"Expected SearchCriteria, got {type(criteria).__name__}")
    if not isinstance(criteria.time_range, TimeRange):
        problems.append("time_range is not a TimeRange")
    elif criteria.time_range.start > criteria.time_range.end:
        problems.append("time range start is after end")
    if not isinstance(criteria.sort, SortSpec) or not isinstance(criteria.sort.order, SortOrder):
        problems.append("sort order is not canonical")
    elif criteria.sort.field != config.timestamp_field:
        problems.append(f"sort field {criteria.sort.field!r} is not {config.timestamp_field!r}")
    if not isinstance(criteria.page, Page):
        problems.append("page is not a Page")
    else:
        if criteria.page.from_ < 0:
            problems.append(f"negative offset {criteria.page.from_}")
        if not 1 <= criteria.page.size <= config.max_size:
            problems.append(f"page size {criteria.page.size} outside 1..{config.max_size}")

    if problems:
        message = "Invalid search criteria: " + "; ".join(problems)
        logger.error(message)
        raise QueryCompilationError(message)


def compile_query(criteria: SearchCriteria, config: SearchConfig) -> BackendQuery:
    """Compile criteria into a BackendQuery without executing it.

    Raises:
        QueryCompilationError: If criteria violate their invariants
    """
    check_criteria(criteria, config)

    filters: list[dict[str, Any]] = []
    must: list[dict[str, Any]] = []

    if criteria.logbooks:
        filters.append(_nested_terms("logbooks", "name", criteria.logbooks))
    if criteria.tags:
        filters.append(_nested_terms("tags", "name", criteria.tags))
    for name in sorted(criteria.properties):
        filters.append(_property_clause(name, criteria.properties[name]))
    if criteria.owner:
        filters.append({"term": {"owner": criteria.owner}})
    if criteria.level:
        filters.append({"term": {"level": criteria.level}})
    filters.append(
        _time_range_clause(criteria.time_range, config.timestamp_field, criteria.include_events)
    )

    if criteria.text_query:
        multi_match: dict[str, Any] = {
            "query": criteria.text_query,
            "fields": list(TEXT_FIELDS),
        }
        if criteria.fuzzy:
            multi_match["fuzziness"] = "AUTO"
        must.append({"multi_match": multi_match})
    if criteria.title:
        must.append({"match": {"title": criteria.title}})
    if criteria.phrase:
        must.append({"match_phrase": {"description": criteria.phrase}})

    bool_query: dict[str, Any] = {"filter": filters}
    if must:
        bool_query["must"] = must

    return BackendQuery(
        index=config.index,
        query={"bool": bool_query},
        sort=[{criteria.sort.field: {"order": criteria.sort.order.value}}],
        from_=criteria.page.from_,
        size=criteria.page.size,
    )
