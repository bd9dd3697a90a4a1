"""Exceptions raised while compiling and executing log searches."""

from __future__ import annotations

from typing import Optional

INVALID_TIMESTAMP = "invalid_timestamp"
INVALID_TIME_RANGE = "invalid_time_range"

# Fixed diagnostic phrase clients match on
INVALID_TIME_RANGE_MESSAGE = "Invalid start and end times"


class SearchError(Exception):
    """Base exception for log search operations."""
    pass


class SearchValidationError(SearchError):
    """Raised when client supplied search parameters cannot be honored.

    Attributes:
        category: Machine-checkable error category
        parameter: Name of the offending parameter, if any
    """

    category = "invalid_parameter"

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON serialization."""
        return {
            "category": self.category,
            "parameter": self.parameter,
            "message": self.message,
        }


class InvalidTimestampError(SearchValidationError):
    """Raised when a start/end token is neither absolute nor relative time."""
    category = INVALID_TIMESTAMP


class InvalidTimeRangeError(SearchValidationError):
    """Raised when the resolved start lies after the resolved end."""
    category = INVALID_TIME_RANGE


class QueryCompilationError(SearchError):
    """Raised when criteria reaching the query compiler break their invariants.

    Indicates a defect upstream of the compiler, not a client input problem.
    """
    pass


class SearchBackendError(SearchError):
    """Raised when the search backend fails to execute a compiled query."""
    pass
