"""Search request compiler - raw parameters in, criteria and query out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .config import SearchConfig
from .criteria import assemble_criteria
from .errors import SearchValidationError
from .models import BackendQuery, SearchCriteria, utc_now
from .params import RawParameters, normalize_parameters
from .query import compile_query
from .sorting import resolve_sort_spec
from .timerange import resolve_time_range

logger = logging.getLogger(__name__)

NowProvider = Callable[[], datetime]


@dataclass(frozen=True)
class CompileResult:
    """Outcome of compiling one search request.

    Exactly one of (criteria and query) or error is set.
    """
    criteria: Optional[SearchCriteria] = None
    query: Optional[BackendQuery] = None
    error: Optional[SearchValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> tuple[SearchCriteria, BackendQuery]:
        """Return (criteria, query), raising the validation error on failure."""
        if self.error is not None:
            raise self.error
        return self.criteria, self.query

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"success": False, "error": self.error.to_dict()}
        return {
            "success": True,
            "criteria": self.criteria.to_dict(),
            "index": self.query.index,
            "body": self.query.to_body(),
        }


class SearchCompiler:
    """Compiles raw search parameters using one configuration."""

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()

    def build_criteria(self, raw: RawParameters, now: datetime) -> SearchCriteria:
        """Normalize, resolve and assemble raw parameters.

        Raises:
            SearchValidationError: On unparseable times or an inverted range
        """
        params = normalize_parameters(raw)
        time_range = resolve_time_range(params.start, params.end, now)
        sort = resolve_sort_spec(params.sort, self.config.timestamp_field)
        return assemble_criteria(params, time_range, sort, self.config)

    def compile(self, raw: RawParameters, now_provider: Optional[NowProvider] = None) -> CompileResult:
        """Compile one request.

        Validation failures are returned in the result; internal errors
        (QueryCompilationError) propagate.

        Args:
            raw: Parameter key -> values, as decoded from the request
            now_provider: Clock, sampled exactly once (default: UTC system time)
        """
        now = (now_provider or utc_now)()
        try:
            criteria = self.build_criteria(raw, now)
        except SearchValidationError as e:
            logger.info("Rejected search request (%s): %s", e.category, e)
            return CompileResult(error=e)
        query = compile_query(criteria, self.config)
        return CompileResult(criteria=criteria, query=query)


def compile_search(
    raw: RawParameters,
    now_provider: Optional[NowProvider] = None,
    config: Optional[SearchConfig] = None,
) -> CompileResult:
    """Compile raw parameters into (SearchCriteria, BackendQuery) or an error."""
    return SearchCompiler(config).compile(raw, now_provider)
