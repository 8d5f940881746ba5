#!/usr/bin/env python
"""Generate predictions or archive a season against an SQLite database.

Two sub-commands are available:

``predict SEASON_ID``
    Replace the stored driver and constructor predictions of a season.

``archive PAYLOAD``
    Apply a confirmed season-end payload (YAML) to the database.  The
    payload has the shape accepted by ``ArchiveInput.from_mapping``.

Usage
-----
::

    python scripts/archive_season.py predict s-2031
    python scripts/archive_season.py archive results/archive_2031.yaml

The database path comes from ``data/engine.yaml`` unless ``--db`` is
given.  A failed archival leaves the season pending; re-read the season
before retrying, as steps that succeeded are not rolled back.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import yaml

# Ensure the project root is on the import path when running as a script.
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from universe_engine.config import load_settings  # noqa: E402
from universe_engine.services.archive import ArchiveInput, archive_season  # noqa: E402
from universe_engine.services.predictions import generate_predictions  # noqa: E402
from universe_engine.storage.base import StorageError  # noqa: E402
from universe_engine.storage.sqlite import SQLiteStore  # noqa: E402

logger = logging.getLogger("archive_season")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--db", type=Path, help="SQLite database (overrides settings)")
    parser.add_argument("--settings", type=Path, help="Settings YAML file")
    sub = parser.add_subparsers(dest="command", required=True)

    predict = sub.add_parser("predict", help="regenerate season predictions")
    predict.add_argument("season_id")

    archive = sub.add_parser("archive", help="apply a season-end payload")
    archive.add_argument("payload", type=Path)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the requested sub-command and return a process exit code."""
    args = _parse_args(argv)
    settings = load_settings(args.settings)
    settings.configure_logging()
    db_path = args.db or settings.database_path

    with SQLiteStore(db_path) as store:
        store.init_db()
        try:
            if args.command == "predict":
                drivers, teams = generate_predictions(store, args.season_id)
                print(f"Stored {len(drivers)} driver and {len(teams)} constructor predictions.")
                return 0

            with open(args.payload, encoding="utf-8") as fh:
                archive_input = ArchiveInput.from_mapping(yaml.safe_load(fh) or {})
            report = archive_season(store, archive_input)
        except StorageError as exc:
            logger.error("aborted: %s", exc)
            return 1

    print(f"Season {report.season_id}: {report.status}")
    print(f"  steps completed : {', '.join(report.completed_steps)}")
    print(f"  drivers updated : {len(report.drivers_updated)}")
    print(f"  teams updated   : {len(report.teams_updated)}")
    print(f"  contracts rolled: {report.contracts_updated} drivers, {report.staff_updated} staff")
    print(f"  objectives      : {len(report.objectives_updated)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
