from .constants import SQL_CONDITIONS_TOKEN, SUBQUERY_ALIAS
from .context import RunContext
from .planner import BoundaryResult, ExtractionPlan, ImportPlan, ImportPlanner, plan_import
from .source import QuerySource, TableSource, resolve_source, split_columns

__all__ = [
    "SQL_CONDITIONS_TOKEN",
    "SUBQUERY_ALIAS",
    "RunContext",
    "BoundaryResult",
    "ExtractionPlan",
    "ImportPlan",
    "ImportPlanner",
    "plan_import",
    "QuerySource",
    "TableSource",
    "resolve_source",
    "split_columns",
]
