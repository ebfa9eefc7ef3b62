from .errors import ErrorCode, PlannerError
from .planning import ImportPlanner, RunContext, plan_import

__version__ = "0.1.0"

__all__ = ["ErrorCode", "PlannerError", "ImportPlanner", "RunContext", "plan_import"]
