"""Action log service — best-effort writes to the relational audit log."""

import structlog
from sqlalchemy.orm import sessionmaker

from storefront.infrastructure.repositories.user_action_repository import SQLAlchemyUserActionRepository

logger = structlog.get_logger(__name__)

SIGNED_UP = "Signed up"
LOGGED_IN = "Logged in"


def log_user_action(session_factory: sessionmaker, user_id: str, action: str) -> None:
    """Append an action for a user in its own session.

    Meant to run as a background task: a failing log store is reported in the
    service log and never reaches the request that triggered it.
    """
    db = None
    try:
        db = session_factory()
        SQLAlchemyUserActionRepository(db).append(user_id, action)
        logger.info("User action logged", user_id=user_id, action=action)
    except Exception as e:
        logger.error("Error logging user action", user_id=user_id, action=action, error=str(e))
    finally:
        if db is not None:
            db.close()
