from sql_import.connections import load_import_job_config
from sql_import.errors import PlannerError
from sql_import.planning import constants, plan_import


def main():
    """
    Example: Planning a partitioned import of a PostgreSQL table.

    This example assumes you have:
    1. A source Postgres database with a ``public.orders`` table
    2. Environment variables SQL_IMPORT_CONNECTION_STRING, SQL_IMPORT_USERNAME
       and SQL_IMPORT_PASSWORD configured
    """

    job = load_import_job_config(
        {
            "connection": {"driver": "postgresql+psycopg"},
            "table": {"table_name": "public.orders"},
        }
    )

    print("Planning PostgreSQL import...")

    try:
        context = plan_import(job)
    except PlannerError as e:
        print(f"Planning failed: {e}")
        return

    print(f"Partition column: {context.get_string(constants.PARTITION_COLUMN_NAME)}")
    print(f"Range: {context.get_string(constants.PARTITION_MIN_VALUE)} .. {context.get_string(constants.PARTITION_MAX_VALUE)}")
    print(f"Data SQL: {context.get_string(constants.DATA_SQL)}")


if __name__ == "__main__":
    main()
