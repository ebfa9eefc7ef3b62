"""Import source planning: partition column, boundaries, and the extraction template."""

from contextlib import closing
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from ..connections._logging import get_logger
from ..connections.config import ConnectionConfig, ImportJobConfig, TableConfig
from ..connections.executor import QueryExecutor
from ..errors import ErrorCode, PlannerError
from . import constants
from .context import RunContext
from .source import QuerySource, TableSource, resolve_source, split_columns

LOGGER = get_logger("planning.planner")

ExecutorFactory = Callable[[ConnectionConfig], QueryExecutor]


class BoundaryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    column_type: int
    min_value: str | None = None
    max_value: str | None = None


class ExtractionPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    data_sql: str
    field_names: str

    @property
    def field_name_list(self) -> list[str]:
        return split_columns(self.field_names)


class ImportPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    driver: str
    connection_string: str
    username: str | None = None
    password: str | None = None
    partition_column: str
    boundary_query: str
    boundary: BoundaryResult
    extraction: ExtractionPlan

    def context_values(self) -> dict[str, Any]:
        values: dict[str, Any] = {
            constants.CONNECTION_DRIVER: self.driver,
            constants.CONNECTION_URL: self.connection_string,
        }
        if self.username is not None:
            values[constants.CONNECTION_USERNAME] = self.username
        if self.password is not None:
            values[constants.CONNECTION_PASSWORD] = self.password

        values.update(
            {
                constants.PARTITION_COLUMN_NAME: self.partition_column,
                constants.PARTITION_COLUMN_TYPE: self.boundary.column_type,
                constants.PARTITION_MIN_VALUE: self.boundary.min_value,
                constants.PARTITION_MAX_VALUE: self.boundary.max_value,
                constants.DATA_SQL: self.extraction.data_sql,
                constants.FIELD_NAMES: self.extraction.field_names,
            }
        )
        return values

    def publish(self, context: RunContext) -> None:
        """Write every planned value into ``context``, or nothing if any key is taken."""
        values = self.context_values()
        conflicts = sorted(key for key in values if key in context)
        if conflicts:
            raise KeyError(f"Context keys already set: {', '.join(conflicts)}")

        for key, value in values.items():
            if key == constants.PARTITION_COLUMN_TYPE:
                context.set_integer(key, value)
            else:
                context.set_string(key, value)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class ImportPlanner:
    """Plans one import run against a relational source.

    ``initialize`` runs validation, partition column resolution, the boundary
    query and data SQL resolution in that order, then publishes the result into
    the run context. One executor is acquired per call and closed on every exit
    path.
    """

    def __init__(self, executor_factory: ExecutorFactory = QueryExecutor.from_config):
        self._executor_factory = executor_factory

    def initialize(
        self,
        context: RunContext,
        connection: ConnectionConfig,
        table: TableConfig,
    ) -> ImportPlan:
        self.validate_connection(connection)

        source = resolve_source(table)
        if isinstance(source, QuerySource):
            source.ensure_conditions_token()

        with closing(self._executor_factory(connection)) as executor:
            partition_column = self.resolve_partition_column(table, executor)
            boundary_query = self.resolve_boundary_query(table, partition_column, executor)
            boundary = self.execute_boundary(boundary_query, executor)
            extraction = self.resolve_data_sql(table, executor)

        plan = ImportPlan(
            driver=connection.driver,
            connection_string=connection.connection_string,
            username=connection.username,
            password=connection.password,
            partition_column=partition_column,
            boundary_query=boundary_query,
            boundary=boundary,
            extraction=extraction,
        )
        plan.publish(context)
        LOGGER.info("Import plan published with %s context keys", len(plan.context_values()))
        return plan

    @staticmethod
    def validate_connection(connection: ConnectionConfig) -> None:
        for field_name, label in (("driver", "Driver"), ("connection_string", "Connection string")):
            if not getattr(connection, field_name):
                raise PlannerError(
                    ErrorCode.MISSING_CONNECTION_PARAMETER,
                    f"{label} is required",
                    details={"parameter": field_name},
                )

    def resolve_partition_column(self, table: TableConfig, executor: QueryExecutor) -> str:
        if table.partition_column is not None:
            return table.partition_column

        if table.table_name is None:
            raise PlannerError(
                ErrorCode.UNRESOLVABLE_PARTITION_COLUMN,
                "Partition column must be set when importing from an SQL statement",
            )

        primary_key = executor.primary_key_of(table.table_name)
        if not primary_key:
            raise PlannerError(
                ErrorCode.UNRESOLVABLE_PARTITION_COLUMN,
                f"Table {table.table_name} has no primary key, set the partition column explicitly",
                details={"table_name": table.table_name},
            )

        LOGGER.info("Using primary key %s of table %s as partition column", primary_key, table.table_name)
        return primary_key

    def resolve_boundary_query(
        self,
        table: TableConfig,
        partition_column: str,
        executor: QueryExecutor,
    ) -> str:
        if table.boundary_query is not None:
            return table.boundary_query

        source = resolve_source(table)
        if isinstance(source, TableSource):
            column = partition_column
            from_clause = executor.delimit_identifier(source.name)
        else:
            column = executor.qualify(partition_column, constants.SUBQUERY_ALIAS)
            inner_sql = source.with_conditions(constants.ALWAYS_TRUE_PREDICATE)
            from_clause = f"({inner_sql}) {constants.SUBQUERY_ALIAS}"

        return f"SELECT MIN({column}), MAX({column}) FROM {from_clause}"

    def execute_boundary(self, sql: str, executor: QueryExecutor) -> BoundaryResult:
        LOGGER.debug("Using boundary query: %s", sql)
        result = executor.execute_query(sql)

        if len(result.columns) != 2:
            raise PlannerError(
                ErrorCode.MALFORMED_BOUNDARY_RESULT,
                f"Boundary query returned {len(result.columns)} columns, expected 2",
                details={"sql": sql, "columns": result.column_names},
            )

        if len(result.rows) != 1:
            raise PlannerError(
                ErrorCode.MALFORMED_BOUNDARY_RESULT,
                f"Boundary query returned {len(result.rows)} rows, expected 1",
                details={"sql": sql},
            )

        min_value, max_value = result.rows[0]
        boundary = BoundaryResult(
            column_type=result.columns[0].type_code,
            min_value=_as_text(min_value),
            max_value=_as_text(max_value),
        )
        LOGGER.info(
            "Boundaries: min=%s, max=%s, columnType=%s",
            boundary.min_value,
            boundary.max_value,
            boundary.column_type,
        )
        return boundary

    def resolve_data_sql(self, table: TableConfig, executor: QueryExecutor) -> ExtractionPlan:
        source = resolve_source(table)
        if isinstance(source, QuerySource):
            source.ensure_conditions_token()

        columns = table.columns
        token = constants.SQL_CONDITIONS_TOKEN

        if isinstance(source, TableSource):
            delimited = executor.delimit_identifier(source.name)
            if columns is None:
                data_sql = f"SELECT * FROM {delimited} WHERE {token}"
                field_names = self._discover_field_names(data_sql, executor)
            else:
                data_sql = f"SELECT {columns} FROM {delimited} WHERE {token}"
                field_names = columns
        elif columns is None:
            data_sql = source.sql
            field_names = self._discover_field_names(data_sql, executor)
        else:
            qualified = ", ".join(
                executor.qualify(column, constants.SUBQUERY_ALIAS) for column in split_columns(columns)
            )
            data_sql = f"SELECT {qualified} FROM ({source.sql}) {constants.SUBQUERY_ALIAS}"
            field_names = columns

        LOGGER.info("Using dataSql: %s", data_sql)
        LOGGER.info("Field names: %s", field_names)
        return ExtractionPlan(data_sql=data_sql, field_names=field_names)

    @staticmethod
    def _discover_field_names(template: str, executor: QueryExecutor) -> str:
        discovery_sql = template.replace(constants.SQL_CONDITIONS_TOKEN, constants.ALWAYS_FALSE_PREDICATE)
        return constants.FIELD_NAME_SEPARATOR.join(executor.get_query_columns(discovery_sql))


def plan_import(
    job: ImportJobConfig,
    context: RunContext | None = None,
    *,
    executor_factory: ExecutorFactory = QueryExecutor.from_config,
) -> RunContext:
    """Plan ``job`` into ``context`` (a fresh one when omitted) and return it."""
    run_context = context if context is not None else RunContext()
    ImportPlanner(executor_factory).initialize(run_context, job.connection, job.table)
    return run_context
