"""
Engine and session handling for the Supabase Postgres database.

Nothing connects at import time: the engine is built on the first session,
so tests, alembic and the CLI can import models freely.

Usage:
    # Scripts: one transaction per block
    from fantasy_tennis.db import get_session

    with get_session() as session:
        ...

    # FastAPI: request-scoped session, the endpoint commits
    @app.get("/api/players")
    def list_players(db: Session = Depends(get_db)):
        ...
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from fantasy_tennis.config import settings

logger = logging.getLogger(__name__)

APPLICATION_NAME = "fantasy-tennis-ingestion"


def normalize_database_url(url: str) -> str:
    """
    Make a Supabase connection string acceptable to SQLAlchemy 2.

    The Supabase dashboard hands out ``postgres://`` URLs; SQLAlchemy only
    registers the ``postgresql`` dialect name.
    """
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def get_engine(url: Optional[str] = None) -> Engine:
    """Build an engine for ``url`` (defaults to DATABASE_URL)."""
    url = normalize_database_url(url or settings.database_url)
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            # Supabase's pooler drops idle connections
            pool_pre_ping=True,
            connect_args={"application_name": APPLICATION_NAME},
        )
    return create_engine(url, **kwargs)


_engine: Optional[Engine] = None

SessionLocal = sessionmaker(autoflush=False)


def _bound_session() -> Session:
    global _engine
    if _engine is None:
        _engine = get_engine()
        logger.debug("Created database engine for %s", _engine.url.render_as_string(hide_password=True))
    return SessionLocal(bind=_engine)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on any exception."""
    session = _bound_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency.

    Endpoints commit explicitly; anything left uncommitted is discarded
    when the session closes.
    """
    db = _bound_session()
    try:
        yield db
    finally:
        db.close()
