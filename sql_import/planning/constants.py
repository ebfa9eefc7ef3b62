"""String contract shared between planning and the downstream extraction stages."""

# Replaced by each partition's row-filter predicate at extraction time.
SQL_CONDITIONS_TOKEN = "${CONDITIONS}"

SUBQUERY_ALIAS = "sub"

ALWAYS_TRUE_PREDICATE = "1 = 1"
ALWAYS_FALSE_PREDICATE = "1 = 0"

FIELD_NAME_SEPARATOR = ","

CONTEXT_PREFIX = "sql_import"

CONNECTION_DRIVER = f"{CONTEXT_PREFIX}.connection.driver"
CONNECTION_URL = f"{CONTEXT_PREFIX}.connection.url"
CONNECTION_USERNAME = f"{CONTEXT_PREFIX}.connection.username"
CONNECTION_PASSWORD = f"{CONTEXT_PREFIX}.connection.password"

PARTITION_COLUMN_NAME = f"{CONTEXT_PREFIX}.partition.column_name"
PARTITION_COLUMN_TYPE = f"{CONTEXT_PREFIX}.partition.column_type"
PARTITION_MIN_VALUE = f"{CONTEXT_PREFIX}.partition.min_value"
PARTITION_MAX_VALUE = f"{CONTEXT_PREFIX}.partition.max_value"

DATA_SQL = f"{CONTEXT_PREFIX}.data_sql"
FIELD_NAMES = f"{CONTEXT_PREFIX}.job.field_names"
