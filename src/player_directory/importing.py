"""
Parsing of player directory CSV exports into player_master rows.
"""

import csv
import io

from .normalize import surname_of

REQUIRED_COLUMNS = ("short_name", "player_positions")


def detect_delimiter(text: str) -> str:
    """Tab- and semicolon-separated exports are common from spreadsheets."""
    first_line = next((line for line in text.splitlines() if line.strip()), "")
    if "\t" in first_line and "," not in first_line:
        return "\t"
    if ";" in first_line and "," not in first_line:
        return ";"
    return ","


def normalize_foot(value) -> str:
    foot = str(value or "").strip().upper()
    return "L" if foot in ("L", "LEFT") else "R"


def to_int(value):
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return None


def make_surname_lower(short_name: str) -> str:
    return surname_of((short_name or "").strip()).lower()


def player_id(version: str, name_lower: str) -> str:
    """Deterministic primary key so re-running an import never duplicates rows."""
    return f"PM|{version}|{name_lower}"


def _optional(value):
    value = (value or "").strip()
    return value or None


def read_player_csv(text: str, version: str) -> list[dict]:
    """
    Parses a directory CSV export into dictionaries ready for bulk_upsert_players.

    Args:
        text: The raw CSV text (a UTF-8 BOM is tolerated).
        version: The dataset version tag stamped on every row.

    Returns:
        One dictionary per row with a non-empty short name.

    Raises:
        ValueError: If the file is empty or lacks a required column.
    """
    rows = [
        row for row in csv.reader(io.StringIO(text), delimiter=detect_delimiter(text))
        if any((cell or "").strip() for cell in row)
    ]
    if len(rows) < 2:
        raise ValueError("CSV looks empty")

    headers = [h.replace("\ufeff", "").strip() for h in rows[0]]
    missing = [c for c in REQUIRED_COLUMNS if c not in headers]
    if missing:
        raise ValueError(f"CSV must include headers: {', '.join(REQUIRED_COLUMNS)}")

    def column(row, name):
        if name not in headers:
            return None
        idx = headers.index(name)
        return row[idx] if idx < len(row) else None

    players = {}
    for row in rows[1:]:
        short_name = (column(row, "short_name") or "").strip()
        if not short_name:
            continue
        name_lower = short_name.lower()
        pid = player_id(version, name_lower)
        # Later rows win, matching the upsert semantics of a re-run
        players[pid] = {
            "id": pid,
            "short_name": short_name,
            "name_lower": name_lower,
            "surname_lower": make_surname_lower(short_name),
            "player_positions": (column(row, "player_positions") or "").strip(),
            "overall": to_int(column(row, "overall")),
            "potential": to_int(column(row, "potential")),
            "age": to_int(column(row, "age")),
            "club_position": _optional(column(row, "club_position")),
            "nationality_name": _optional(column(row, "nationality_name")),
            "preferred_foot": normalize_foot(column(row, "preferred_foot")),
            "version": version,
        }
    return list(players.values())
