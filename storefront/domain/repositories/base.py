"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import TypeVar, List, Optional, Any, Protocol

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations.

    Implementations write through the unit of work's session and never
    commit on their own; the surrounding UnitOfWork decides.
    """

    def get_by_id(self, id: int) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def list(self, skip: int = 0, limit: int = 100) -> List[T]:
        """List entities with pagination."""
        ...

    def add(self, obj: T) -> T:
        """Stage a new entity and assign its primary key."""
        ...

    def create(self, obj_in: Any) -> T:
        """Build an entity from a dict or pydantic model and stage it."""
        ...

    def update(self, db_obj: T, obj_in: Any) -> T:
        """Update an existing entity."""
        ...

    def delete(self, id: int) -> Optional[T]:
        """Delete an entity by ID."""
        ...
