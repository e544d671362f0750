"""
SQLAlchemy implementation of the User Action Repository.
"""

from sqlalchemy.orm import Session

from storefront.domain.models.user_action import UserAction
from storefront.domain.repositories.user_action_repository import UserActionRepository


class SQLAlchemyUserActionRepository(UserActionRepository):
    """Appends rows to the user_actions table."""

    def __init__(self, db: Session):
        self.db = db

    def append(self, user_id: str, action: str) -> UserAction:
        entry = UserAction(user_id=str(user_id), action=action)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry
