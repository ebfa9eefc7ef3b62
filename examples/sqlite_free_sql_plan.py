import json

from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from sql_import.connections import ConnectionConfig, QueryExecutor, TableConfig
from sql_import.planning import ImportPlanner, RunContext


def main():
    """
    Example: Planning an import from a free-form query over an in-memory SQLite database.

    The query must carry ${CONDITIONS}; each extraction worker later replaces it
    with its own range predicate on the partition column.
    """
    engine = create_engine("sqlite+pysqlite://", poolclass=StaticPool)
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE payments (id INTEGER PRIMARY KEY, paid_at TEXT, amount NUMERIC)"))
        connection.execute(
            text("INSERT INTO payments VALUES (1, '2024-01-03', 10), (2, '2024-02-11', 25), (3, '2024-03-07', 40)")
        )

    connection_config = ConnectionConfig(driver="sqlite+pysqlite", connection_string="sqlite://")
    table_config = TableConfig(
        sql="SELECT id, paid_at, amount FROM payments WHERE amount > 5 AND ${CONDITIONS}",
        columns="id,amount",
        partition_column="id",
    )

    planner = ImportPlanner(executor_factory=lambda config: QueryExecutor.from_config(config, engine=engine))
    context = RunContext()
    planner.initialize(context, connection_config, table_config)

    print(json.dumps(context.as_dict(redact=True), indent=2))
    engine.dispose()


if __name__ == "__main__":
    main()
