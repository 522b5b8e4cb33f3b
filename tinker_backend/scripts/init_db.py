"""
Create the users / lesson_progress tables if they do not exist yet.

Usage:
  python -m tinker_backend.scripts.init_db [--db-path data/tinker_foss.db] [--log-level DEBUG]
"""
from __future__ import annotations

import argparse

from tinker_backend.db import get_db_path
from tinker_backend.logs import configure_logging
from tinker_backend.schema import init_database, table_names


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument("--db-path", default=None, help="database file (default: TINKER_DB_PATH / config.yaml / data/tinker_foss.db)")
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args(argv)

    configure_logging(args.log_level)
    path = get_db_path(args.db_path)
    init_database(path)
    print({"message": "ok", "db_path": path, "tables": table_names(path)})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
