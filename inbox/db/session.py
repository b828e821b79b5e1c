# inbox/db/session.py
"""
Database session management.
Provides database connections for FastAPI and context managers.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from inbox.core.config import DATABASE_URL

log = logging.getLogger("inbox.database")


# ────────────────────────────────────────────
# SQLAlchemy Engine
# ────────────────────────────────────────────
def build_engine(url: str) -> Engine:
    """Create an engine, pooled for servers and single-connection for SQLite."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        echo=False  # Set to True for SQL debugging
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = build_engine(DATABASE_URL)
SessionLocal = build_session_factory(engine)


# ────────────────────────────────────────────
# Context Manager
# ────────────────────────────────────────────
@contextmanager
def get_db_session(factory: sessionmaker = None):
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as db:
            chat = db.query(Chat).first()
    """
    db = (factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ────────────────────────────────────────────
# Database Utilities
# ────────────────────────────────────────────
def test_db_connection(factory: sessionmaker = None) -> bool:
    """Test database connection"""
    try:
        with get_db_session(factory) as db:
            db.execute(text("SELECT 1"))
        log.debug("✅ Database connection successful")
        return True
    except Exception as e:
        log.error(f"❌ Database connection failed: {e}")
        return False


def init_db(bind: Engine = None):
    """
    Initialize database tables.
    This will create all tables defined in models.
    """
    from inbox.db.base import Base
    try:
        Base.metadata.create_all(bind=bind or engine)
        log.info("✅ Database tables initialized")
    except Exception as e:
        log.error(f"❌ Failed to initialize database: {e}")
        raise
