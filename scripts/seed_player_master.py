#!/usr/bin/env python
"""
Import a player directory CSV export into the player_master table.

Rows get deterministic ids, so re-running the import for the same
version updates existing players instead of duplicating them.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from player_directory.crud import bulk_upsert_players
from player_directory.database import get_db, init_db
from player_directory.importing import read_player_csv
from player_directory.logger import get_logger

logger = get_logger(__name__)
# Add a console handler for this specific script
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
logger.addHandler(console_handler)


def seed(csv_path: Path, version: str, batch_size: int = 1000) -> int:
    """
    Reads the CSV and upserts its rows in batches, committing each batch.

    Returns:
        The number of rows written.
    """
    players = read_player_csv(csv_path.read_text(encoding="utf-8"), version)
    logger.info(f"Rows to upsert: {len(players):,} (version {version})")

    init_db()
    done = 0
    with get_db() as db:
        for start in range(0, len(players), batch_size):
            batch = players[start:start + batch_size]
            bulk_upsert_players(db, batch)
            db.commit()
            done += len(batch)
            logger.info(f"Progress: {done:,}/{len(players):,}")
    return done


def main():
    parser = argparse.ArgumentParser(description="Seed the player directory from a CSV export")
    parser.add_argument("csv_path", nargs="?", default="player_master_fc26.csv", help="CSV file to import")
    parser.add_argument("version", nargs="?", default="FC26", help="Dataset version tag (default: FC26)")
    parser.add_argument("--batch-size", type=int, default=1000, help="Rows per upsert statement")
    args = parser.parse_args()

    try:
        total = seed(Path(args.csv_path), args.version, args.batch_size)
    except Exception as e:
        logger.error(f"Import failed: {e}")
        sys.exit(1)
    logger.info(f"Done. Upserted {total:,} players.")


if __name__ == "__main__":
    main()
