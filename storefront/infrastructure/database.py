"""Relational store for the user action log (SQLAlchemy)."""

from functools import lru_cache

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

Base = declarative_base()


@lru_cache
def get_engine() -> Engine:
    # pool_pre_ping recycles connections the server dropped while idle
    return create_engine(settings.ACTION_LOG_DATABASE_URL, pool_pre_ping=True)


@lru_cache
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_action_log_store(engine: Engine) -> None:
    """Create the action log tables if they do not exist yet."""
    # Imported for its side effect of registering the table on Base.metadata
    from storefront.domain.models.user_action import UserAction  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Action log tables created/verified", url=engine.url.render_as_string(hide_password=True))
