"""Sort order resolution.

Every input yields a canonical order: tokens outside the synonym table fall
back to DESC ("most recent first") instead of failing the request.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from .models import DEFAULT_SORT_FIELD, SortOrder, SortSpec

logger = logging.getLogger(__name__)

DEFAULT_ORDER = SortOrder.DESC


class MatchKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"


# (kind, lowercase token, order), checked in order
SORT_RULES: tuple[tuple[MatchKind, str, SortOrder], ...] = (
    (MatchKind.EXACT, "asc", SortOrder.ASC),
    (MatchKind.EXACT, "desc", SortOrder.DESC),
    (MatchKind.PREFIX, "up", SortOrder.ASC),
    (MatchKind.PREFIX, "asc", SortOrder.ASC),
    (MatchKind.PREFIX, "down", SortOrder.DESC),
    (MatchKind.PREFIX, "desc", SortOrder.DESC),
)


def match_sort_token(token: str) -> Optional[SortOrder]:
    """Look a single token up in SORT_RULES, ignoring case."""
    token = token.strip().lower()
    for kind, pattern, order in SORT_RULES:
        if kind is MatchKind.EXACT and token == pattern:
            return order
        if kind is MatchKind.PREFIX and token.startswith(pattern):
            return order
    return None


def resolve_sort(tokens: Sequence[str] = ()) -> SortOrder:
    """Resolve the requested sort order.

    Only the first token is honored; later tokens are ignored.
    """
    if not tokens:
        return DEFAULT_ORDER
    order = match_sort_token(tokens[0])
    if order is None:
        logger.debug("Unrecognized sort token %r, using %s", tokens[0], DEFAULT_ORDER.value)
        return DEFAULT_ORDER
    return order


def resolve_sort_spec(tokens: Sequence[str] = (), field: str = DEFAULT_SORT_FIELD) -> SortSpec:
    return SortSpec(field=field, order=resolve_sort(tokens))
