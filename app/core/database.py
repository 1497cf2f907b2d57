"""Database configuration and session management for SQLite.

This module configures the SQLite database engine with settings optimized
for a web application: WAL mode for concurrent access and foreign key
enforcement for data integrity.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while writing.
      Managers toggling items and the auto-lock job writing must not block
      readers of the same shift.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled so a
      checklist item can never reference a shift that does not exist.

    - **check_same_thread=False**: Required for FastAPI. Sessions may be
      handed between threads by the dependency injection machinery.

Writes go through :func:`transaction`, which makes each checklist operation
a single commit: either every change is visible to readers or none is.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import event as sa_event
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from app.core import rules  # noqa: F401  (registers the store's write rules)
from app.core.config import settings
from app.core.errors import ChecklistError, PersistenceFailure

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session


@contextmanager
def transaction(session: Session):
    """Commit everything done inside the block as one write.

    Rule violations raised while flushing propagate unchanged. Any other
    store error is rolled back and surfaced as PersistenceFailure; nothing
    is retried.
    """
    try:
        yield session
        session.commit()
    except ChecklistError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Store write failed: {e}")
        raise PersistenceFailure(str(e)) from e
