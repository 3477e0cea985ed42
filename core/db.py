# core/db.py
"""
Database management for the commission ledger.
Single database holding the serialized document store.
"""
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from config import Config
from models.base import Base

logger = logging.getLogger(__name__)

# Database engines
_engine = None
_SessionFactory = None


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite is pinned to one connection so every session sees
    the same database.
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )
    return create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True
    )


def get_engine() -> Engine:
    """Get or create database engine."""
    global _engine
    if _engine is None:
        database_url = Config.get(Config.DATABASE_URL)
        _engine = build_engine(database_url)
        logger.info(f"Database engine created: {database_url}")
    return _engine


def get_session_factory():
    """Get or create session factory."""
    global _SessionFactory
    if _SessionFactory is None:
        engine = get_engine()
        _SessionFactory = sessionmaker(bind=engine)
        logger.info("Session factory created")
    return _SessionFactory


def get_session() -> Session:
    """
    Get a new database session.

    Returns:
        Session instance
    """
    factory = get_session_factory()
    return factory()


@contextmanager
def get_db_session_ctx(session_factory=None):
    """
    Context manager for database sessions.

    Usage:
        with get_db_session_ctx() as session:
            row = session.get(StoredDocument, "mlm_db_v2")
    """
    session = session_factory() if session_factory else get_session()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        session.close()


def setup_database(engine: Engine = None):
    """Initialize database - create all tables."""
    logger.info("Setting up database...")
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database setup completed")


def drop_all_tables(engine: Engine = None):
    """Drop all tables - USE WITH CAUTION!"""
    logger.warning("Dropping all tables...")
    engine = engine or get_engine()
    Base.metadata.drop_all(engine)
    logger.info("All tables dropped")


def dispose_engine():
    """Dispose the shared engine and forget the session factory."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _SessionFactory = None
