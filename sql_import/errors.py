"""Error taxonomy for import planning."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    MISSING_CONNECTION_PARAMETER = "PLANNER_0001"
    AMBIGUOUS_SOURCE = "PLANNER_0002"
    UNSPECIFIED_SOURCE = "PLANNER_0003"
    UNRESOLVABLE_PARTITION_COLUMN = "PLANNER_0004"
    MISSING_CONDITIONS_TOKEN = "PLANNER_0005"
    MALFORMED_BOUNDARY_RESULT = "PLANNER_0006"
    DATA_SOURCE_FAILURE = "PLANNER_0007"


_DEFAULT_MESSAGES = {
    ErrorCode.MISSING_CONNECTION_PARAMETER: "Required connection parameter is missing",
    ErrorCode.AMBIGUOUS_SOURCE: "Table name and SQL statement cannot be specified together",
    ErrorCode.UNSPECIFIED_SOURCE: "Either a table name or an SQL statement must be specified",
    ErrorCode.UNRESOLVABLE_PARTITION_COLUMN: "Unable to determine the partition column",
    ErrorCode.MISSING_CONDITIONS_TOKEN: "SQL statement must contain the conditions substitution token",
    ErrorCode.MALFORMED_BOUNDARY_RESULT: "Boundary query must return exactly two columns",
    ErrorCode.DATA_SOURCE_FAILURE: "Query against the data source failed",
}


class PlannerError(Exception):
    """Terminal failure of one planning attempt.

    Every instance carries a stable ``code``. When an underlying driver error is
    wrapped, it is kept as ``original_error`` and chained as ``__cause__`` by the
    raising site.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        original_error: BaseException | None = None,
    ):
        self.code = code
        self.message = message or _DEFAULT_MESSAGES[code]
        self.details = details or {}
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"{self.code.value}: {self.message}"]
        if self.details:
            parts.append(", ".join(f"{key}={value}" for key, value in self.details.items()))
        if self.original_error is not None:
            parts.append(f"Caused by: {self.original_error}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code.value,
            "error_kind": self.code.name,
            "message": self.message,
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None,
        }
