from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
import contextlib

from .config import get_config


def build_database_url() -> str:
    """
    Returns the SQLAlchemy URL for the directory database.

    PD_DATABASE_URL wins when set; otherwise the PostgreSQL URL is assembled
    from the individual PD_DB_* settings, all of which are required.
    """
    url = get_config("PD_DATABASE_URL", None)
    if url:
        return url

    db_user = get_config("PD_DB_USER")
    db_password = get_config("PD_DB_PASSWORD")
    db_host = get_config("PD_DB_HOST")
    db_port = get_config("PD_DB_PORT")
    db_database = get_config("PD_DB_DATABASE")
    return f"postgresql+psycopg2://{db_user}:{db_password}@{db_host}:{db_port}/{db_database}"


SQLALCHEMY_DATABASE_URL = build_database_url()

# SQLite connections are shared with FastAPI's worker threads
_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@contextlib.contextmanager
def get_db():
    """
    Provides a database session for a single unit of work.
    Use with 'with' statements; the session is always closed on exit.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Creates any missing tables."""
    # Models must be imported so they register with Base.metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
