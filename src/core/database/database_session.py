"""
Database session management for the pass admin application.

Every request opens exactly one session through get_db_session(); the engine
and session factory are created lazily on first use.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from src.core.config import DatabaseConfig as DatabaseSettings
from src.core.database.db_config import DatabaseConfig

logger = logging.getLogger(__name__)

# Module-level globals for lazy initialization
_engine: Engine | None = None
_session_factory = None
_scoped_session = None


def get_engine(settings: DatabaseSettings | None = None) -> Engine:
    """Get or create the database engine (lazy initialization).

    Args:
        settings: Explicit database settings. Scripts pass settings loaded from an
            env file; the application relies on the process environment.
    """
    global _engine, _session_factory, _scoped_session

    if _engine is None:
        settings = settings or DatabaseSettings()
        connection_string = DatabaseConfig.get_connection_string(settings)
        query_timeout = settings.query_timeout

        _engine = create_engine(
            connection_string,
            pool_size=5,
            max_overflow=10,
            pool_recycle=1800,
            pool_pre_ping=True,
            echo=False,
            connect_args={"connect_timeout": settings.connect_timeout},
        )

        @event.listens_for(_engine, "connect")
        def set_statement_timeout(dbapi_conn, connection_record):
            """Set statement_timeout on new connections."""
            cursor = dbapi_conn.cursor()
            cursor.execute(f"SET statement_timeout = '{query_timeout * 1000}'")
            cursor.close()

        _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
        _scoped_session = scoped_session(_session_factory)
        logger.info("Database engine created")

    return _engine


def reset_engine() -> None:
    """Reset engine - closes existing connections and clears global state."""
    global _engine, _session_factory, _scoped_session

    if _scoped_session is not None:
        _scoped_session.remove()
        _scoped_session = None

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _session_factory = None


def get_scoped_session():
    """Get the scoped session factory (lazy initialization)."""
    get_engine()
    return _scoped_session


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Usage:
        with get_db_session() as session:
            client = session.scalars(select(Client).filter_by(slug=slug)).first()
            session.commit()  # Explicit commit needed

    The session rolls back on SQLAlchemy errors and is always closed.
    """
    scoped = get_scoped_session()
    session = scoped()
    try:
        yield session
    except (OperationalError, DisconnectionError) as e:
        logger.error(f"Database connection error: {e}")
        session.rollback()
        scoped.remove()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        session.rollback()
        raise
    finally:
        session.close()
        scoped.remove()
