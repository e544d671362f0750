"""
User Repository Interface.
Defines user-specific data access operations.
"""

from typing import List, Optional

from storefront.domain.models.user import User
from storefront.domain.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_email(self, email: str) -> Optional[User]:
        """Get the account registered with this email."""
        ...

    def list_newest_first(self) -> List[User]:
        """All users ordered by creation time, most recent first."""
        ...

    def pull_address(self, user_id: str, address_id: str) -> None:
        """Remove one embedded address; unknown ids are ignored."""
        ...
