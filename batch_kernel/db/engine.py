"""
Engine and session management for the SQL slice store.

One process-wide engine is configured with ``init_engine_from_url()``;
sessions come from ``get_session()`` or, for a commit-or-rollback block,
``session_scope()``.  Slice stores never commit on their own, so the
transaction boundary is always chosen here or by the caller.

An in-memory SQLite URL (``sqlite://``) keeps a single shared connection so
the database outlives individual sessions, which is what the test suite
relies on.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from batch_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None

_NOT_READY = "Database engine not initialized. Call init_engine_from_url() first."


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_recycle: int = 1800,
) -> Engine:
    """Create the engine and session factory for ``database_url``.

    Pool options apply to server databases only; SQLite uses one static
    connection shared across threads.
    """
    global _engine, _sessions

    if database_url.startswith("sqlite"):
        engine_options = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    else:
        engine_options = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
            "pool_recycle": pool_recycle,
        }

    _engine = create_engine(database_url, echo=echo, **engine_options)
    _sessions = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name})
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_READY)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Session factory for workers that open their own sessions."""
    if _sessions is None:
        raise RuntimeError(_NOT_READY)
    return _sessions


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Commit on clean exit, roll back and re-raise on error."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from batch_kernel.db.base import Base
    import sliced_batch.models  # noqa: F401  registers the slice tables

    return Base.metadata


def create_tables() -> None:
    _metadata().create_all(get_engine())
    logger.info("tables_created")


def drop_tables() -> None:
    _metadata().drop_all(get_engine())
    logger.info("tables_dropped")


def reset_engine() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None
