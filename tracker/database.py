from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from tracker.config import settings


def _ensure_sqlite_dirs(url: str) -> None:
    if not url.startswith("sqlite:///"):
        return
    path = url.replace("sqlite:///", "", 1)
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)


def create_session_factory(database_url: str, echo: bool = False):
    """Build an engine and a bound session factory for a database URL"""
    _ensure_sqlite_dirs(database_url)
    db_engine = create_engine(database_url, echo=echo, future=True)
    factory = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, expire_on_commit=False)
    return db_engine, factory


Base = declarative_base()

engine, SessionLocal = create_session_factory(settings.database_url, settings.echo_sql)


def init_db(bind=None):
    """Create all tables"""
    # Import models so they register with Base.metadata
    import tracker.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind=None):
    """Drop all tables"""
    import tracker.models  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
