"""User action log — append-only record of account events."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from storefront.infrastructure.database import Base


class UserAction(Base):
    __tablename__ = "user_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Mongo ObjectId as a string; not a foreign key, the users live in another store
    user_id = Column(String(64), nullable=False, index=True)
    action = Column(String(255), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<UserAction {self.user_id} - {self.action}>"
