"""Blocking SQLAlchemy query executor used for planning-time metadata lookups."""

from contextlib import contextmanager
from datetime import date, datetime, time
from decimal import Decimal
from enum import IntEnum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ErrorCode, PlannerError
from ._logging import get_logger
from .config import ConnectionConfig

LOGGER = get_logger("connections.executor")


class SqlType(IntEnum):
    """Column type codes, numbered like ``java.sql.Types``."""

    BIT = -7
    TINYINT = -6
    BIGINT = -5
    BINARY = -2
    NULL = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111


# DB-API 2.0 type objects compare equal to the driver's type codes.
_DBAPI_TYPE_OBJECTS = (
    ("DATETIME", SqlType.TIMESTAMP),
    ("NUMBER", SqlType.NUMERIC),
    ("STRING", SqlType.VARCHAR),
    ("BINARY", SqlType.BINARY),
)


def _type_from_value(value: Any) -> SqlType:
    if isinstance(value, bool):
        return SqlType.BOOLEAN
    if isinstance(value, int):
        return SqlType.BIGINT
    if isinstance(value, float):
        return SqlType.DOUBLE
    if isinstance(value, Decimal):
        return SqlType.DECIMAL
    if isinstance(value, datetime):
        return SqlType.TIMESTAMP
    if isinstance(value, date):
        return SqlType.DATE
    if isinstance(value, time):
        return SqlType.TIME
    if isinstance(value, str):
        return SqlType.VARCHAR
    if isinstance(value, (bytes, bytearray, memoryview)):
        return SqlType.BINARY
    return SqlType.OTHER


def resolve_type_code(dbapi: Any, driver_type_code: Any, value: Any = None) -> SqlType:
    """Map a result column to a SqlType.

    The driver's declared type code wins when it matches a DB-API type object.
    Drivers that declare nothing (pysqlite) fall back to the sample value.
    """
    if driver_type_code is not None and dbapi is not None:
        for type_name, sql_type in _DBAPI_TYPE_OBJECTS:
            type_object = getattr(dbapi, type_name, None)
            if type_object is not None and type_object == driver_type_code:
                return sql_type

    if value is not None:
        return _type_from_value(value)

    return SqlType.NULL if driver_type_code is None else SqlType.OTHER


class ColumnMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type_code: int = Field(default=int(SqlType.OTHER))


class QueryResult(BaseModel):
    columns: list[ColumnMetadata] = Field(default_factory=list)
    rows: list[tuple[Any, ...]] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]


class QueryExecutor:
    """Execute SQL and inspect metadata against one data source.

    The executor creates its engine lazily from ``connection_string`` with the
    drivername replaced by ``driver``. An injected ``engine`` is borrowed and is
    never disposed by :meth:`close`.
    """

    def __init__(
        self,
        driver: str,
        connection_string: str,
        username: str | None = None,
        password: str | None = None,
        *,
        engine: Engine | None = None,
    ):
        self.driver = driver
        self.connection_string = connection_string
        self.username = username
        self.password = password
        self._engine = engine
        self._owns_engine = engine is None
        self._closed = False

    @classmethod
    def from_config(cls, config: ConnectionConfig, *, engine: Engine | None = None) -> "QueryExecutor":
        return cls(
            config.driver or "",
            config.connection_string or "",
            config.username,
            config.password,
            engine=engine,
        )

    def __enter__(self) -> "QueryExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def engine(self) -> Engine:
        if self._closed:
            raise RuntimeError("QueryExecutor is closed")

        if self._engine is None:
            try:
                with _data_source_errors("Engine creation"):
                    self._engine = create_engine(self._build_url(), pool_pre_ping=True)
            except ImportError as exc:
                # DB-API module of the selected dialect is not installed
                LOGGER.error("Driver %s is not available: %s", self.driver, exc)
                raise PlannerError(
                    ErrorCode.DATA_SOURCE_FAILURE,
                    "Engine creation failed",
                    details={"operation": "Engine creation", "driver": self.driver},
                    original_error=exc,
                ) from exc
            LOGGER.info("Created engine for driver=%s", self.driver)
        return self._engine

    def _build_url(self) -> URL:
        url = make_url(self.connection_string)
        if self.driver:
            url = url.set(drivername=self.driver)
        if self.username is not None:
            url = url.set(username=self.username)
        if self.password is not None:
            url = url.set(password=self.password)
        return url

    def execute_query(self, sql: str) -> QueryResult:
        """Run ``sql`` and return every row with per-column name and type code."""
        LOGGER.debug("Executing query: %s", sql)
        engine = self.engine

        with _data_source_errors("Query execution", sql):
            with engine.connect() as connection:
                result = connection.execute(text(sql))
                description = result.cursor.description if result.cursor is not None else None
                names = list(result.keys())
                rows = [tuple(row) for row in result]

        dbapi = engine.dialect.dbapi
        first_row = rows[0] if rows else ()
        columns = []
        for index, name in enumerate(names):
            driver_type_code = description[index][1] if description else None
            sample = first_row[index] if index < len(first_row) else None
            columns.append(
                ColumnMetadata(
                    name=name,
                    type_code=int(resolve_type_code(dbapi, driver_type_code, sample)),
                )
            )

        LOGGER.debug("Query returned columns=%s rows=%s", names, len(rows))
        return QueryResult(columns=columns, rows=rows)

    def get_query_columns(self, sql: str) -> list[str]:
        return self.execute_query(sql).column_names

    def primary_key_of(self, table_name: str) -> str | None:
        """Return the first primary-key column of ``table_name`` (``schema.table`` allowed)."""
        schema, _, name = table_name.rpartition(".")
        engine = self.engine

        with _data_source_errors("Primary key lookup"):
            constraint = inspect(engine).get_pk_constraint(name, schema=schema or None)

        columns = constraint.get("constrained_columns") or []
        if len(columns) > 1:
            LOGGER.warning(
                "Table %s has a composite primary key %s, using %s",
                table_name,
                columns,
                columns[0],
            )
        return columns[0] if columns else None

    def delimit_identifier(self, name: str) -> str:
        preparer = self.engine.dialect.identifier_preparer
        return ".".join(preparer.quote_identifier(part) for part in name.split("."))

    @staticmethod
    def qualify(column_name: str, alias: str) -> str:
        return f"{alias}.{column_name}"

    def close(self) -> None:
        if self._closed:
            return

        self._closed = True
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            LOGGER.info("Disposed engine for driver=%s", self.driver)
        self._engine = None


@contextmanager
def _data_source_errors(operation: str, sql: str | None = None) -> Iterator[None]:
    """Wrap SQLAlchemy and driver errors into a data-source planning error."""
    try:
        yield
    except SQLAlchemyError as exc:
        details = {"operation": operation}
        if sql is not None:
            details["sql"] = sql
        LOGGER.error("%s failed: %s", operation, exc)
        raise PlannerError(
            ErrorCode.DATA_SOURCE_FAILURE,
            f"{operation} failed",
            details=details,
            original_error=exc,
        ) from exc


def test_connection(config: ConnectionConfig, *, raise_on_error: bool = False) -> bool:
    """Run a lightweight SELECT 1 against the configured data source."""
    try:
        with QueryExecutor.from_config(config) as executor:
            executor.execute_query("SELECT 1")
        return True
    except Exception:
        LOGGER.exception("Connection test failed")
        if raise_on_error:
            raise
        return False
