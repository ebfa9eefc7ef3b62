import json
import sys
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, text

from sql_import.cli import main
from sql_import.planning import constants
from sql_import.planning.context import RunContext


def _json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture
def sqlite_job(tmp_path):
    database_path = tmp_path / "shop.db"
    engine = create_engine(f"sqlite:///{database_path}")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE orders (id INTEGER PRIMARY KEY, customer TEXT)"))
        connection.execute(text("INSERT INTO orders (id, customer) VALUES (4, 'ann'), (8, 'ben')"))
    engine.dispose()

    def write(table: dict) -> str:
        connection = {"driver": "sqlite+pysqlite", "connection_string": f"sqlite:///{database_path}"}
        config_path = tmp_path / "job.json"
        config_path.write_text(json.dumps({"connection": connection, "table": table}), encoding="utf-8")
        return str(config_path)

    return write


def test_cli_plan_success_prints_context(sqlite_job, capsys, monkeypatch):
    config_path = sqlite_job({"table_name": "orders"})
    monkeypatch.setattr(sys, "argv", ["sql-import", "plan", "--config", config_path])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 0
    context = _json_lines(capsys.readouterr().out)[0]
    assert context[constants.PARTITION_COLUMN_NAME] == "id"
    assert context[constants.PARTITION_MIN_VALUE] == "4"
    assert context[constants.PARTITION_MAX_VALUE] == "8"
    assert context[constants.DATA_SQL] == 'SELECT * FROM "orders" WHERE ${CONDITIONS}'
    assert context[constants.FIELD_NAMES] == "id,customer"
    assert constants.CONNECTION_PASSWORD not in context


def test_cli_connection_flags_override_config(sqlite_job, tmp_path, capsys, monkeypatch):
    sqlite_job({"table_name": "orders"})
    database_url = f"sqlite:///{tmp_path / 'shop.db'}"
    config_path = tmp_path / "partial.json"
    config_path.write_text(
        json.dumps({"connection": {"driver": "nosuch+driver"}, "table": {"table_name": "orders"}}),
        encoding="utf-8",
    )
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "sql-import",
            "--log-level",
            "WARNING",
            "plan",
            "--config",
            str(config_path),
            "--driver",
            "sqlite+pysqlite",
            "--connection-string",
            database_url,
        ],
    )

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 0
    context = _json_lines(capsys.readouterr().out)[0]
    assert context[constants.CONNECTION_DRIVER] == "sqlite+pysqlite"
    assert context[constants.FIELD_NAMES] == "id,customer"


def test_cli_plan_error_reports_code(sqlite_job, capsys, monkeypatch):
    config_path = sqlite_job({"table_name": "orders", "sql": "SELECT * FROM orders WHERE ${CONDITIONS}"})
    monkeypatch.setattr(sys, "argv", ["sql-import", "plan", "--config", config_path])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1
    error = _json_lines(capsys.readouterr().err)[0]
    assert error["error_code"] == "PLANNER_0002"
    assert error["error_kind"] == "AMBIGUOUS_SOURCE"


def test_cli_plan_redacts_published_password(tmp_path, capsys, monkeypatch):
    config_path = tmp_path / "job.json"
    config_path.write_text(json.dumps({"table": {"table_name": "orders"}}), encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["sql-import", "plan", "--config", str(config_path)])

    planned = RunContext({constants.DATA_SQL: "SELECT 1", constants.CONNECTION_PASSWORD: "hunter2"})

    with patch("sql_import.cli.plan_import", return_value=planned) as mock_plan:
        with pytest.raises(SystemExit) as excinfo:
            main()

    assert excinfo.value.code == 0
    assert mock_plan.call_args.args[0].table.table_name == "orders"
    printed = _json_lines(capsys.readouterr().out)
    assert printed == [{constants.DATA_SQL: "SELECT 1", constants.CONNECTION_PASSWORD: "***"}]


def test_cli_plan_missing_config_file(capsys, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["sql-import", "plan", "--config", "/nonexistent/job.json"])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1
    assert "Error loading job config" in capsys.readouterr().err


def test_cli_test_connection(sqlite_job, capsys, monkeypatch):
    config_path = sqlite_job({"table_name": "orders"})
    monkeypatch.setattr(sys, "argv", ["sql-import", "test-connection", "--config", config_path])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 0
    assert _json_lines(capsys.readouterr().out)[0]["success"] is True


def test_cli_without_command_prints_help(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["sql-import"])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 1
