#!/usr/bin/env python3
"""
Create the catalog tables (entities, tags, and association tables) in the configured database.
Run it directly before first API startup; it is safe to rerun because existing tables are skipped.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sqlalchemy.exc import SQLAlchemyError

from src.api.db_access import DatabaseClient
from src.api.services.ddl import apply_catalog_ddl
from src.common.logging import configure_logging
from src.common.settings import get_settings

LOGGER = logging.getLogger("catalog")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create catalog tables if they do not exist")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL from the environment")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging()
    database_url = args.database_url or get_settings().DATABASE_URL

    db = DatabaseClient(database_url=database_url)
    try:
        tables = apply_catalog_ddl(db.engine)
    except SQLAlchemyError:
        LOGGER.exception("Catalog DDL failed")
        sys.exit(1)
    finally:
        db.dispose()

    print(json.dumps({"tables": tables}, indent=2))


if __name__ == "__main__":
    main()
