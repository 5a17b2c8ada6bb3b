"""
Engine, session and schema helpers for the reference database.

Declarative models use SQLAlchemy 2.0 typed mappings. Any SQLAlchemy URL
works; SQLite is the default for development and tests.

Engines and session factories are created explicitly by the monitor
context at startup rather than at import time.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine with settings appropriate for the database type.

    In-memory SQLite shares a single connection so that every thread
    (detectors, registry fan-out workers, request handlers) sees the
    same database.
    """
    engine_kwargs = {
        'echo': echo,  # Log SQL in debug mode
    }

    is_sqlite = url.startswith('sqlite')
    if is_sqlite:
        engine_kwargs['connect_args'] = {'check_same_thread': False}
        if url in ('sqlite://', 'sqlite:///:memory:'):
            engine_kwargs['poolclass'] = StaticPool

    engine = create_engine(url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine, 'connect')
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """
            Configure SQLite for concurrent readers.

            WAL mode allows reads during writes - the registry is read
            constantly while ingestion upserts schedules.
            """
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA journal_mode=WAL')
            cursor.execute('PRAGMA synchronous=NORMAL')
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Avoid lazy loading issues
    )


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Transactional session for writers (seeding, schedule upserts).

    Usage:
        with session_scope(ctx.session_factory) as session:
            session.execute(...)

    Commits on success, rolls back on any exception, always closes.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """
    Create every reference-data table that does not exist yet.

    Idempotent; safe to call on every startup. Schema changes to
    an existing deployment need a migration tool.
    """
    # Import models so they register on Base.metadata
    from skyguard.models import airport, gate, schedule  # noqa: F401

    Base.metadata.create_all(bind=engine)
