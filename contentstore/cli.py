"""
Admin commands for a content store database.

Usage:
    contentstore install                 # Create the schema record table
    contentstore tables                  # List managed tables
    contentstore describe <table>        # Print a table's stored schema as JSON
    contentstore drop <table>            # Drop a managed table
    contentstore --db data.duckdb tables # Use another database file
"""

import argparse
import asyncio
import json
import sys

from contentstore.container import Container
from contentstore.errors import is_error
from contentstore.models.schema import dump_schema
from contentstore.settings import DB_PATH, LOG_DIR, LOG_LEVEL, TABLE_PREFIX
from contentstore.settings.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contentstore", description="Manage content store tables.")
    parser.add_argument("--db", default=DB_PATH, help=f"Database file (default: {DB_PATH})")
    parser.add_argument("--prefix", default=TABLE_PREFIX, help="Table name prefix")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    parser.add_argument("--log-file", action="store_true", help="Also log to a rotating file")
    parser.add_argument("--sql", action="store_true", help="Log every statement sent to the database")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("install", help="Create the schema record table")
    commands.add_parser("tables", help="List managed tables")
    describe = commands.add_parser("describe", help="Show a table's stored schema")
    describe.add_argument("table")
    drop = commands.add_parser("drop", help="Drop a managed table")
    drop.add_argument("table")
    return parser


async def run(args: argparse.Namespace) -> int:
    container = Container(args.db, args.prefix)
    try:
        installed = await container.install()
        if is_error(installed):
            print(f"Error: {installed.message}", file=sys.stderr)
            return 1

        if args.command == "install":
            print(f"Installed: {args.db}")
            return 0

        if args.command == "tables":
            result = await container.store.tables()
            if not is_error(result):
                for table in result:
                    print(table)
        elif args.command == "describe":
            result = await container.migrator.get_table_structure(args.table)
            if not is_error(result):
                print(json.dumps(dump_schema(result), indent=2))
        else:
            result = await container.migrator.drop_table(args.table)
            if not is_error(result):
                print(f"Dropped: {args.table}")

        if is_error(result):
            print(f"Error: {result.message}", file=sys.stderr)
            return 1
        return 0
    finally:
        container.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_dir=LOG_DIR if args.log_file else None, sql=args.sql)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
