from sqlalchemy.orm import Session
from sqlalchemy.dialects.postgresql import insert as pg_insert

from . import models


def bulk_upsert_players(db: Session, players_data: list[dict]):
    """
    Performs a bulk "upsert" of directory rows using PostgreSQL's
    ON CONFLICT DO UPDATE feature. Ids are deterministic per version and
    name, so re-running an import updates rows instead of duplicating them.

    Args:
        db: The SQLAlchemy database session.
        players_data: A list of dictionaries, one per player_master row.

    Returns:
        The number of rows affected by the operation.
    """
    if not players_data:
        return 0

    stmt = pg_insert(models.PlayerMaster).values(players_data)

    on_conflict_stmt = stmt.on_conflict_do_update(
        index_elements=['id'],
        set_={
            "short_name": stmt.excluded.short_name,
            "name_lower": stmt.excluded.name_lower,
            "surname_lower": stmt.excluded.surname_lower,
            "player_positions": stmt.excluded.player_positions,
            "overall": stmt.excluded.overall,
            "potential": stmt.excluded.potential,
            "age": stmt.excluded.age,
            "club_position": stmt.excluded.club_position,
            "nationality_name": stmt.excluded.nationality_name,
            "preferred_foot": stmt.excluded.preferred_foot,
        },
    )

    result = db.execute(on_conflict_stmt)
    return result.rowcount


def get_player_page(
    db: Session,
    version: str,
    limit: int,
    next_token: str | None = None,
) -> tuple[list[models.PlayerMaster], str | None]:
    """
    Retrieves one page of the directory for a dataset version.

    Pages are keyset-paginated on the primary key: the continuation token
    is the id of the last row of the previous page.

    Args:
        db: The SQLAlchemy database session.
        version: The dataset version tag (compared by equality).
        limit: Maximum number of rows in the page.
        next_token: Continuation token from the previous page, if any.

    Returns:
        The rows of the page and the token for the next one (None on the last page).
    """
    query = db.query(models.PlayerMaster).filter(models.PlayerMaster.version == version)
    if next_token:
        query = query.filter(models.PlayerMaster.id > next_token)

    # Fetch one extra row to know whether another page follows
    rows = query.order_by(models.PlayerMaster.id).limit(limit + 1).all()
    if len(rows) > limit:
        rows = rows[:limit]
        return rows, rows[-1].id
    return rows, None


def version_exists(db: Session, version: str) -> bool:
    """Returns True if at least one directory row exists for the version."""
    return db.query(models.PlayerMaster.id).filter(models.PlayerMaster.version == version).first() is not None


def create_player_master(db: Session, **fields) -> models.PlayerMaster:
    """
    Adds a single directory row. The calling function handles the commit.
    """
    player = models.PlayerMaster(**fields)
    db.add(player)
    return player


def get_snapshot_payload(db: Session, cache_key: str) -> bytes | None:
    """Returns the stored snapshot bytes for a cache key, or None."""
    snapshot = db.query(models.DirectorySnapshot).filter(models.DirectorySnapshot.cache_key == cache_key).first()
    return snapshot.payload if snapshot else None


def save_snapshot_payload(db: Session, cache_key: str, payload: bytes) -> models.DirectorySnapshot:
    """
    Creates or replaces the snapshot bytes for a cache key.
    The calling function is responsible for the commit.
    """
    snapshot = db.query(models.DirectorySnapshot).filter(models.DirectorySnapshot.cache_key == cache_key).first()
    if snapshot:
        snapshot.payload = payload
    else:
        snapshot = models.DirectorySnapshot(cache_key=cache_key, payload=payload)
        db.add(snapshot)
    return snapshot
