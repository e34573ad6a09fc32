"""Run a single templated query from the command line.

Connection settings come from DB_NAME, DB_USER, DB_PASSWORD and DB_HOST.

    python -m dbconnection.cli "SELECT * FROM users WHERE id IN (:ids)" -l ids=1,2,3
    python -m dbconnection.cli "DELETE FROM users WHERE id = :id" -p id=4 --execute
"""

import argparse
import json
import logging

from .connection import DatabaseConnection
from .log_config import setup_logging

logger = logging.getLogger(__name__)


def parse_scalar(text: str):
    """Interpret a command-line value as int, bool or string."""
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(text)
    except ValueError:
        return text


def parse_assignment(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected name=value, got {text!r}")
    return name, value


def build_values(params, lists) -> dict:
    values = {}
    for name, raw in params or []:
        values[name] = parse_scalar(raw)
    for name, raw in lists or []:
        values[name] = [parse_scalar(v) for v in raw.split(",")] if raw else []
    return values


def run_query(db: DatabaseConnection, query: str, values: dict, execute=False, single=False):
    if execute:
        return db.query_execute(query, values)
    return db.query_select(query, values, single_record=single)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a query with list-aware named parameters")
    parser.add_argument("query")
    parser.add_argument("-p", "--param", type=parse_assignment, action="append",
                        help="scalar parameter, name=value")
    parser.add_argument("-l", "--list", dest="lists", type=parse_assignment, action="append",
                        help="list parameter, name=v1,v2,...")
    parser.add_argument("--execute", action="store_true", help="run as a mutation query")
    parser.add_argument("--single", action="store_true", help="return only the last row")
    parser.add_argument("--unbuffered", action="store_true", help="stream rows from a server-side cursor")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    values = build_values(args.param, args.lists)
    with DatabaseConnection.from_env() as db:
        if args.unbuffered:
            db.use_buffered_query(False)
        try:
            result = run_query(db, args.query, values, execute=args.execute, single=args.single)
        except Exception as e:
            logger.error("Query failed: %s", e)
            raise

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
