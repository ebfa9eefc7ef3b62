"""Public entrypoints for job configuration and the planning-time query executor."""

from .config import ConnectionConfig, ImportJobConfig, TableConfig, load_import_job_config
from .executor import ColumnMetadata, QueryExecutor, QueryResult, SqlType, test_connection

__all__ = [
    "ConnectionConfig",
    "TableConfig",
    "ImportJobConfig",
    "load_import_job_config",
    "ColumnMetadata",
    "QueryExecutor",
    "QueryResult",
    "SqlType",
    "test_connection",
]
