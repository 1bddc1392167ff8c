"""
User Repository Interface.
"""

from typing import Optional

from storefront.domain.repositories.base import BaseRepository
from storefront.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (emails are unique)."""
        ...
