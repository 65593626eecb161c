"""Database engine and session factory.

Provides database connectivity and session management for the CleanFlow
backend. PostgreSQL is the production backend; SQLite is supported for local
development and tests.

On SQLite every transaction is opened with BEGIN IMMEDIATE. SQLite has no
row locks, so taking the write lock up front is what serializes concurrent
conversions (job-number allocation) across connections.
"""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _sqlite_connect(dbapi_conn, connection_record):
        # Hand transaction control to SQLAlchemy's "begin" event below
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url``.

    Pool settings only apply to PostgreSQL; SQLite connections get a generous
    busy timeout so that writers queue on the database lock instead of
    failing immediately.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _configure_sqlite(engine)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory used by the unit of work.

    expire_on_commit is off so that documents returned from a finished unit
    of work keep their loaded attributes after the session is closed.
    """
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


engine = create_db_engine(settings.DATABASE_URL)

SessionLocal = create_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints that need a raw session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
