"""Normalization of raw, multi-valued search parameters.

Clients send parameters the way a query string decodes them: every key maps
to a list of values, keys arrive in any letter case and under several
synonyms. This module folds them into one typed ``NormalizedParameters``.

Recoverable problems (unknown keys, blank values, malformed property tokens)
are absorbed here and never fail the request.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)

RawParameters = Mapping[str, Sequence[str]]

# Canonical filter names
TEXT = "text"
TITLE = "title"
PHRASE = "phrase"
FUZZY = "fuzzy"
LOGBOOKS = "logbooks"
TAGS = "tags"
PROPERTIES = "properties"
OWNER = "owner"
LEVEL = "level"
START = "start"
END = "end"
INCLUDE_EVENTS = "include_events"
SORT = "sort"
SIZE = "size"
FROM = "from"

# Accepted (lowercase) key -> canonical filter name
ALIASES: Mapping[str, str] = MappingProxyType({
    "text": TEXT,
    "desc": TEXT,
    "description": TEXT,
    "title": TITLE,
    "phrase": PHRASE,
    "fuzzy": FUZZY,
    "logbooks": LOGBOOKS,
    "logbook": LOGBOOKS,
    "tags": TAGS,
    "tag": TAGS,
    "properties": PROPERTIES,
    "property": PROPERTIES,
    "owner": OWNER,
    "level": LEVEL,
    "start": START,
    "end": END,
    "includeevents": INCLUDE_EVENTS,
    "includeevent": INCLUDE_EVENTS,
    "sort": SORT,
    "size": SIZE,
    "limit": SIZE,
    "from": FROM,
    "offset": FROM,
})

# Separators between items packed into a single list value: "ops,beam|rf"
LIST_SEPARATORS = re.compile(r"[,|;]")

PROPERTY_DELIMITER = "."

_TRUE_TOKENS = frozenset({"", "true", "1", "yes", "on"})


@dataclass(frozen=True)
class NormalizedParameters:
    """Search parameters after alias folding and value normalization."""
    text: Optional[str] = None
    title: Optional[str] = None
    phrase: Optional[str] = None
    fuzzy: bool = False
    logbooks: frozenset[str] = frozenset()
    tags: frozenset[str] = frozenset()
    properties: Mapping[str, frozenset[str]] = field(default_factory=dict)
    owner: Optional[str] = None
    level: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    include_events: bool = False
    sort: tuple[str, ...] = ()
    size: Optional[str] = None
    from_: Optional[str] = None


def coerce_raw_parameters(params: Optional[Mapping[str, Any]]) -> dict[str, list[str]]:
    """Convert a loosely typed mapping into RawParameters.

    Bare strings become one-element lists, ``None`` values are skipped and
    other scalars are converted with ``str``. Keys differing only in case or
    surrounding whitespace are merged in arrival order.
    """
    raw: dict[str, list[str]] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            values = [value]
        else:
            values = list(value)
        bucket = raw.setdefault(str(key).strip().lower(), [])
        for item in values:
            if item is None:
                continue
            if isinstance(item, bool):
                item = "true" if item else "false"
            elif isinstance(item, bytes):
                item = item.decode("utf-8")
            bucket.append(str(item))
    return raw


def raw_parameters_from_query_string(query_string: str) -> dict[str, list[str]]:
    """Decode an URL query string (``a=1&b=2&b=3``) into RawParameters."""
    return coerce_raw_parameters(
        parse_qs(query_string.lstrip("?"), keep_blank_values=True)
    )


def _split_items(values: Iterable[str]) -> list[str]:
    items = []
    for value in values:
        for item in LIST_SEPARATORS.split(value):
            item = item.strip()
            if item:
                items.append(item)
    return items


def _first(values: Sequence[str]) -> Optional[str]:
    for value in values:
        value = value.strip()
        if value:
            return value
    return None


def _flag(values: Sequence[str]) -> bool:
    return any(value.strip().lower() in _TRUE_TOKENS for value in values)


def parse_property_token(token: str) -> Optional[tuple[str, str]]:
    """Split a ``name.value`` property token.

    Returns:
        (name, value) or None if the token is malformed
    """
    name, sep, value = token.partition(PROPERTY_DELIMITER)
    name, value = name.strip(), value.strip()
    if not sep or not name or not value:
        return None
    return name, value


def normalize_parameters(raw: RawParameters) -> NormalizedParameters:
    """Fold raw request parameters into canonical filters.

    Args:
        raw: Mapping of parameter key to its values in arrival order

    Returns:
        NormalizedParameters instance
    """
    grouped: dict[str, list[str]] = {}
    for key, values in raw.items():
        if values is None:
            continue
        if isinstance(values, str):
            values = [values]
        canonical = ALIASES.get(key.strip().lower())
        if canonical is None:
            logger.debug("Ignoring unrecognized search parameter %r", key)
            continue
        grouped.setdefault(canonical, []).extend(v for v in values if v is not None)

    properties: dict[str, set[str]] = {}
    for token in _split_items(grouped.get(PROPERTIES, [])):
        pair = parse_property_token(token)
        if pair is None:
            logger.debug("Dropping malformed property filter %r", token)
            continue
        name, value = pair
        properties.setdefault(name, set()).add(value)

    texts = [v.strip() for v in grouped.get(TEXT, []) if v.strip()]

    return NormalizedParameters(
        text=" ".join(texts) or None,
        title=_first(grouped.get(TITLE, [])),
        phrase=_first(grouped.get(PHRASE, [])),
        fuzzy=_flag(grouped.get(FUZZY, [])),
        logbooks=frozenset(_split_items(grouped.get(LOGBOOKS, []))),
        tags=frozenset(_split_items(grouped.get(TAGS, []))),
        properties=MappingProxyType({
            name: frozenset(values) for name, values in properties.items()
        }),
        owner=_first(grouped.get(OWNER, [])),
        level=_first(grouped.get(LEVEL, [])),
        start=_first(grouped.get(START, [])),
        end=_first(grouped.get(END, [])),
        include_events=_flag(grouped.get(INCLUDE_EVENTS, [])),
        sort=tuple(v.strip() for v in grouped.get(SORT, [])),
        size=_first(grouped.get(SIZE, [])),
        from_=_first(grouped.get(FROM, [])),
    )
