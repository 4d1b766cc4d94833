from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from warden.configuration.config import settings


Base = declarative_base()


def _sqlite_path() -> Path:
    """Resolve the SQLite file path from settings.DATABASE_URL (creating parent dirs)."""
    raw = settings.DATABASE_URL
    db_file = Path(raw).expanduser().resolve()
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return db_file


def _resolve_db_url() -> str:
    """Build the database URL from settings."""
    sqlite_file = _sqlite_path()
    return str(URL.create("sqlite", database=sqlite_file.as_posix()))


def build_engine(db_url: str) -> Engine:
    """
    Create an engine for `db_url`.

    In-memory SQLite gets a StaticPool so every session shares the same database.
    """
    url = make_url(db_url)
    connect_args: dict = {}
    engine_kwargs: dict = dict(pool_pre_ping=True)

    is_sqlite = url.drivername.startswith("sqlite")
    in_memory = is_sqlite and (url.database or "") in ("", ":memory:")
    if is_sqlite:
        connect_args["check_same_thread"] = False
    if in_memory:
        engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(str(url), connect_args=connect_args, **engine_kwargs)

    if is_sqlite and not in_memory:

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_connection, _) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.close()

    return engine


def build_session_factory(bound_engine: Engine) -> sessionmaker:
    return sessionmaker(bind=bound_engine, autocommit=False, autoflush=False, class_=Session)


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    """Lazily create the process-wide engine from settings."""
    global _engine
    if _engine is None:
        _engine = build_engine(_resolve_db_url())
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


@contextmanager
def session_scope(session_factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """Yield a DB session, committing on success and rolling back on error."""
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bound_engine: Optional[Engine] = None) -> None:
    """Create tables if they do not exist yet."""
    # Register models on Base.metadata before create_all
    from warden.persistence import models  # noqa: F401

    Base.metadata.create_all(bind=bound_engine or get_engine())
