"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import TypeVar, Optional, Protocol

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for document-style CRUD operations keyed by string ids."""

    def get_by_id(self, id: str) -> Optional[T]:
        """Get a single entity by ID, or None for unknown or malformed ids."""
        ...

    def create(self, obj: T) -> T:
        """Insert a new entity."""
        ...

    def save(self, obj: T) -> T:
        """Replace the stored entity with this one."""
        ...

    def delete(self, id: str) -> bool:
        """Delete an entity by ID. Returns whether something was removed."""
        ...
