#!/usr/bin/env python3

"""
Export one version of the player directory to a static bundle file.
The cache loads this file before falling back to paging the database.
"""

import json
import sys
import os
from pathlib import Path

# Add the src directory to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from player_directory.crud import get_player_page
from player_directory.database import get_db
from player_directory.sources import FileBundleSource, record_from_row


def export_directory_bundle(version: str, bundle_dir: str = "data", page_size: int = 1000) -> Path:
    """
    Export every player of a version to <bundle_dir>/player_directory_<version>.json.

    Args:
        version: Dataset version tag to export
        bundle_dir: Directory the cache reads bundles from
        page_size: Rows fetched per query
    """
    output_path = FileBundleSource(bundle_dir).path_for(version)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"Exporting {version} directory to {output_path}...")
    players = []
    token = None
    with get_db() as db:
        while True:
            rows, token = get_player_page(db, version, page_size, token)
            players.extend(record_from_row(row).model_dump(by_alias=True) for row in rows)
            if len(players) % 10000 < page_size:
                print(f"  Processed {len(players):,} players...")
            if token is None:
                break

    if not players:
        raise ValueError(f"No players found for version {version}")

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump({"version": version, "players": players}, f, ensure_ascii=False)

    file_size = output_path.stat().st_size
    print(f"Export complete!")
    print(f"File: {output_path}")
    print(f"Size: {file_size:,} bytes ({file_size / 1024 / 1024:.1f} MB)")
    print(f"Players: {len(players):,}")
    return output_path


def main():
    """Main function to run the export."""
    import argparse

    parser = argparse.ArgumentParser(description="Export a player directory bundle")
    parser.add_argument("version", nargs="?", default="FC26", help="Dataset version (default: FC26)")
    parser.add_argument(
        "--output-dir",
        default="data",
        help="Bundle directory (default: data)"
    )

    args = parser.parse_args()

    try:
        export_directory_bundle(args.version, args.output_dir)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
