import argparse
import json
import sys

from .connections import load_import_job_config
from .connections import test_connection as test_source_connection
from .connections._logging import configure_logging
from .errors import PlannerError
from .planning import plan_import


def _load_job(args):
    try:
        return load_import_job_config(
            file_path=args.config,
            driver=args.driver,
            connection_string=args.connection_string,
        )
    except Exception as e:
        print(f"Error loading job config: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_plan(args):
    """Handle plan subcommand."""
    job = _load_job(args)

    try:
        context = plan_import(job)
    except PlannerError as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(context.as_dict(redact=True)))
    print("Import plan created.", file=sys.stderr)
    sys.exit(0)


def cmd_test_connection(args):
    """Handle test-connection subcommand."""
    job = _load_job(args)

    success = test_source_connection(job.connection)
    print(json.dumps({"success": success, "driver": job.connection.driver}))

    if success:
        print("Connection successful.", file=sys.stderr)
        sys.exit(0)
    else:
        print("Connection failed.", file=sys.stderr)
        sys.exit(1)


def _add_job_arguments(parser):
    parser.add_argument("--config", required=True, help="Path to import job JSON/YAML config")
    parser.add_argument("--driver", help="SQLAlchemy dialect+driver, overrides the config file")
    parser.add_argument("--connection-string", help="Database URL, overrides the config file")


def main():
    parser = argparse.ArgumentParser(description="SQL import planning CLI")
    parser.add_argument("--log-level", help="Log level (default: SQL_IMPORT_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

    plan_parser = subparsers.add_parser("plan", help="Plan an import run and print the run context")
    _add_job_arguments(plan_parser)

    test_parser = subparsers.add_parser("test-connection", help="Test the source connection")
    _add_job_arguments(test_parser)

    args = parser.parse_args()

    if args.log_level:
        configure_logging(args.log_level)

    if args.command == "plan":
        cmd_plan(args)
    elif args.command == "test-connection":
        cmd_test_connection(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
