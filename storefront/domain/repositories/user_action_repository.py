"""
User Action Repository Interface.
The action log is append-only: there is no update or delete.
"""

from typing import Protocol

from storefront.domain.models.user_action import UserAction


class UserActionRepository(Protocol):
    """Interface for the append-only user action log."""

    def append(self, user_id: str, action: str) -> UserAction:
        """Record that a user performed an action, timestamped now."""
        ...
