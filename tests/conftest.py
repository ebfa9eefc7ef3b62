import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from sql_import.connections.executor import QueryExecutor

SQLITE_DRIVER = "sqlite+pysqlite"
SQLITE_URL = "sqlite://"


class RecordingExecutor(QueryExecutor):
    """QueryExecutor over a borrowed engine that records executed SQL and close calls."""

    def __init__(self, engine):
        super().__init__(SQLITE_DRIVER, SQLITE_URL, engine=engine)
        self.executed: list[str] = []
        self.close_calls = 0

    def execute_query(self, sql):
        self.executed.append(sql)
        return super().execute_query(sql)

    def close(self):
        self.close_calls += 1
        super().close()


@pytest.fixture
def engine():
    engine = create_engine(
        f"{SQLITE_DRIVER}://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE orders (id INTEGER PRIMARY KEY, customer TEXT, amount NUMERIC)"))
        connection.execute(
            text("INSERT INTO orders (id, customer, amount) VALUES (3, 'carol', 30), (7, 'alice', 10), (12, 'bob', 25)")
        )
        connection.execute(text("CREATE TABLE t (a INTEGER, b TEXT)"))
        connection.execute(text("INSERT INTO t (a, b) VALUES (5, 'x'), (9, 'y')"))
        connection.execute(text("CREATE TABLE empty_orders (id INTEGER PRIMARY KEY, note TEXT)"))
        connection.execute(text("CREATE TABLE events (code TEXT, payload TEXT)"))
        connection.execute(text("INSERT INTO events (code, payload) VALUES ('b-2', 'p1'), ('a-1', 'p2'), ('c-3', 'p3')"))
        connection.execute(
            text("CREATE TABLE order_lines (order_id INTEGER, line_no INTEGER, sku TEXT, PRIMARY KEY (order_id, line_no))")
        )

    yield engine
    engine.dispose()


@pytest.fixture
def executor(engine):
    return RecordingExecutor(engine)
