from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._config import load_connection_config, read_config_file
from ._logging import get_logger, redact_config

LOGGER = get_logger("connections.config")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ConnectionConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Presence of driver and connection_string is checked by the planner so the
    # failure carries a planning error code.
    driver: str | None = None
    connection_string: str | None = None
    username: str | None = None
    password: str | None = None

    @field_validator("driver", "connection_string", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class TableConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    table_name: str | None = None
    sql: str | None = None
    columns: str | None = None
    partition_column: str | None = None
    boundary_query: str | None = None

    @field_validator("table_name", "sql", "columns", "partition_column", "boundary_query", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("columns")
    @classmethod
    def _require_column_names(cls, value: str | None) -> str | None:
        # " , " names no column; treat it like an omitted list.
        if value is not None and not any(part.strip() for part in value.split(",")):
            return None
        return value


class ImportJobConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    table: TableConfig = Field(default_factory=TableConfig)


def load_import_job_config(
    config: dict[str, Any] | None = None,
    *,
    file_path: str | Path | None = None,
    env_prefix: str | None = "SQL_IMPORT",
    driver: str | None = None,
    connection_string: str | None = None,
    username: str | None = None,
    password: str | None = None,
) -> ImportJobConfig:
    """Resolve a job config from a JSON/YAML file, <PREFIX>_* env keys, and an explicit dict.

    Environment keys only feed the ``connection`` block, e.g. ``SQL_IMPORT_PASSWORD``.
    Non-null ``driver``/``connection_string``/``username``/``password`` arguments
    win over every other layer.
    """
    explicit = config or {}
    connection = load_connection_config(
        explicit.get("connection"),
        file_path=file_path,
        section="connection",
        env_prefix=env_prefix,
        overrides={
            "driver": driver,
            "connection_string": connection_string,
            "username": username,
            "password": password,
        },
    )
    table = {
        **(read_config_file(file_path).get("table") or {}),
        **(explicit.get("table") or {}),
    }

    job = ImportJobConfig.model_validate({"connection": connection, "table": table})
    LOGGER.info("Import job config resolved: %s", redact_config(job.model_dump()))
    return job
