"""Database configuration and session management."""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def create_db_engine(database_url: str, debug: bool = False) -> Engine:
    """Build an engine for the analytics database.

    SQLite URLs (tests, local runs) share one connection through StaticPool so
    that ``sqlite://`` in-memory databases survive across sessions.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=debug,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Enable foreign key support for SQLite."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    else:
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=300,
            echo=debug
        )

    if debug:
        _install_query_timer(engine)
    return engine


def _install_query_timer(engine: Engine) -> None:
    """Log query execution time in debug mode."""

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["query_start_time"].pop()
        logger.debug(f"Query executed in {time.perf_counter() - started:.4f}s: {statement[:100]}...")


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


@contextmanager
def session_scope(session_factory: Callable[[], Session]) -> Iterator[Session]:
    """Transactional scope: commit on success, roll back and re-raise on error."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    # Registers the table classes on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_db(engine: Engine) -> None:
    """Drop every analytics table."""
    from .. import models  # noqa: F401

    Base.metadata.drop_all(bind=engine)


def close_db(engine: Engine) -> None:
    """Close database connections."""
    engine.dispose()
