"""Document store for user profiles (MongoDB via pymongo)."""

from functools import lru_cache

import structlog
from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

from storefront.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

USERS_COLLECTION = "users"


@lru_cache
def get_mongo_client() -> MongoClient:
    # MongoClient connects lazily; one client (and pool) per process
    return MongoClient(settings.MONGODB_URL, tz_aware=True)


def get_mongo_database() -> Database:
    return get_mongo_client()[settings.MONGODB_DB]


def ensure_indexes(db: Database) -> None:
    users = db[USERS_COLLECTION]
    users.create_index("email", unique=True)
    users.create_index([("created_at", DESCENDING)])
    logger.info("User store indexes created/verified", database=db.name)
