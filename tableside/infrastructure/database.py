import logging
import time

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from tableside.core.config import settings

logger = logging.getLogger(__name__)

# Base class for declarative ORM models.
Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """SQLite needs cross-thread access (FastAPI threadpool); in-memory SQLite needs a single shared connection."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def make_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit=False: repositories hand detached rows back to services
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = make_session_factory(engine)


def connect_database(bind: Engine, retries: int, wait_seconds: float) -> bool:
    """Create tables, retrying while the database container boots."""
    # Importing registers the models on Base.metadata
    from tableside.domain import models  # noqa: F401

    for attempt in range(retries):
        try:
            logger.info(f"🔄 Attempting DB connection ({attempt + 1}/{retries})...")
            Base.metadata.create_all(bind=bind)
            logger.info("✅ DB Connected and Tables Created.")
            return True
        except OperationalError:
            logger.warning(f"⚠️ DB not ready yet. Waiting {wait_seconds}s...")
            time.sleep(wait_seconds)
    logger.error("❌ Could not connect to DB after retries.")
    return False
