"""SQLAlchemy engine and session setup for the remote product store."""

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import get_settings

Base = declarative_base()


@lru_cache
def get_engine() -> Engine:
    """Engine for DATABASE_URL. Only called when remote storage is configured."""
    settings = get_settings()
    return create_engine(settings.DATABASE_URL, pool_pre_ping=True)


@lru_cache
def get_session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autocommit=False, autoflush=False)


def init_db(engine: Engine) -> None:
    """Create tables (dev only: use migrations in production)."""
    # Models must be imported so they register on Base.metadata
    from app.domain.models import product  # noqa: F401

    Base.metadata.create_all(bind=engine)


