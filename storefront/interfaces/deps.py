"""
API Dependencies — store handles and external clients.

Each provider is overridable through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends
from pymongo.database import Database
from sqlalchemy.orm import sessionmaker

from storefront.domain.repositories.user_repository import UserRepository
from storefront.infrastructure.database import get_session_factory
from storefront.infrastructure.image_host import ImageHost, build_image_host
from storefront.infrastructure.mailer import Mailer, build_mailer
from storefront.infrastructure.mongo import get_mongo_database
from storefront.infrastructure.repositories.user_repository import MongoUserRepository


def get_user_db() -> Database:
    return get_mongo_database()


def get_user_repository(db: Database = Depends(get_user_db)) -> UserRepository:
    """Get user repository instance."""
    return MongoUserRepository(db)


def get_action_log_session_factory() -> sessionmaker:
    return get_session_factory()


@lru_cache
def get_image_host() -> ImageHost:
    return build_image_host()


@lru_cache
def get_mailer() -> Mailer:
    return build_mailer()
