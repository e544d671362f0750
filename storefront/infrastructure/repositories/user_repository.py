"""
MongoDB implementation of the User Repository.
"""

from typing import List, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from storefront.core.exceptions import DuplicateUserException
from storefront.domain.models.user import User
from storefront.domain.repositories.user_repository import UserRepository
from storefront.infrastructure.mongo import USERS_COLLECTION

logger = structlog.get_logger(__name__)


def _object_id(id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(id)
    except (InvalidId, TypeError):
        return None


class MongoUserRepository(UserRepository):
    """User repository backed by a pymongo collection."""

    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION]

    def get_by_id(self, id: str) -> Optional[User]:
        oid = _object_id(id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return User.from_document(doc) if doc else None

    def get_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": email})
        return User.from_document(doc) if doc else None

    def list_newest_first(self) -> List[User]:
        cursor = self.collection.find().sort("created_at", DESCENDING)
        return [User.from_document(doc) for doc in cursor]

    def create(self, obj: User) -> User:
        try:
            self.collection.insert_one(obj.to_document())
        except DuplicateKeyError:
            # Lost a race with a concurrent signup for the same email
            logger.warning("Duplicate email rejected by unique index", email=obj.email)
            raise DuplicateUserException()
        return obj

    def save(self, obj: User) -> User:
        try:
            self.collection.replace_one({"_id": ObjectId(obj.id)}, obj.to_document())
        except DuplicateKeyError:
            raise DuplicateUserException()
        return obj

    def delete(self, id: str) -> bool:
        oid = _object_id(id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count == 1

    def pull_address(self, user_id: str, address_id: str) -> None:
        oid = _object_id(user_id)
        if oid is None:
            return
        self.collection.update_one({"_id": oid}, {"$pull": {"addresses": {"_id": address_id}}})
