from sqlalchemy import (
    Column,
    Integer,
    String,
    LargeBinary,
    TIMESTAMP,
    func,
)

from .database import Base


class PlayerMaster(Base):
    """
    SQLAlchemy model for the reference player directory ('player_master' table).
    One row per player per dataset version.
    """
    __tablename__ = "player_master"

    id = Column(String(255), primary_key=True)  # "PM|<version>|<name_lower>"
    short_name = Column(String(255), nullable=False)
    name_lower = Column(String(255), nullable=False, index=True)
    surname_lower = Column(String(255))
    player_positions = Column(String(64), nullable=False)
    overall = Column(Integer)
    potential = Column(Integer)
    age = Column(Integer)
    club_position = Column(String(16))
    nationality_name = Column(String(128))
    preferred_foot = Column(String(1))
    version = Column(String(32), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<PlayerMaster(short_name='{self.short_name}', version='{self.version}')>"


class DirectorySnapshot(Base):
    """
    SQLAlchemy model for durable search-index snapshots, keyed by cache key.
    The payload is opaque bytes owned by the snapshot store.
    """
    __tablename__ = "directory_snapshots"

    cache_key = Column(String(255), primary_key=True)
    payload = Column(LargeBinary, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<DirectorySnapshot(cache_key='{self.cache_key}')>"
