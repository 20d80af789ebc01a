from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .schema import Base


def get_engine(sqlite_path: str) -> Engine:
    """
    Create an engine for a file-backed SQLite database and ensure tables exist.

    Connections may be checked out from worker threads, so the same-thread
    check of the sqlite3 driver is disabled.
    """
    engine_url = f"sqlite:///{sqlite_path}"
    engine = create_engine(
        engine_url,
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """Session factory for collection handles (caller closes each session)."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
