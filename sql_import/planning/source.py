"""Exclusive table-or-SQL source specification."""

from dataclasses import dataclass

from ..connections.config import TableConfig
from ..errors import ErrorCode, PlannerError
from .constants import SQL_CONDITIONS_TOKEN


@dataclass(frozen=True)
class TableSource:
    name: str


@dataclass(frozen=True)
class QuerySource:
    sql: str

    @property
    def has_conditions_token(self) -> bool:
        return SQL_CONDITIONS_TOKEN in self.sql

    def ensure_conditions_token(self) -> None:
        if not self.has_conditions_token:
            raise PlannerError(
                ErrorCode.MISSING_CONDITIONS_TOKEN,
                f"SQL statement must contain {SQL_CONDITIONS_TOKEN}",
                details={"sql": self.sql},
            )

    def with_conditions(self, predicate: str) -> str:
        return self.sql.replace(SQL_CONDITIONS_TOKEN, predicate)


Source = TableSource | QuerySource


def resolve_source(table: TableConfig) -> Source:
    """Return the single configured source, rejecting both-set and neither-set configs."""
    if table.table_name is not None and table.sql is not None:
        raise PlannerError(
            ErrorCode.AMBIGUOUS_SOURCE,
            details={"table_name": table.table_name},
        )

    if table.table_name is not None:
        return TableSource(table.table_name)

    if table.sql is not None:
        return QuerySource(table.sql)

    raise PlannerError(ErrorCode.UNSPECIFIED_SOURCE)


def split_columns(columns: str) -> list[str]:
    return [column.strip() for column in columns.split(",") if column.strip()]
