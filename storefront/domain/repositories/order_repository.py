"""
Order Repository Interface.
"""

from typing import List, Optional

from storefront.domain.repositories.base import BaseRepository
from storefront.domain.models.order import Order, OrderItem


class OrderRepository(BaseRepository[Order]):
    """Interface for Order-specific operations."""

    def get_for_update(self, id: int) -> Optional[Order]:
        """Get an order with its items, row-locked for the current transaction."""
        ...

    def list_by_user(self, user_id: int) -> List[Order]:
        """Get all orders placed by a user, oldest first."""
        ...

    def add_item(self, order: Order, item: OrderItem) -> OrderItem:
        """Attach a new line to an order."""
        ...

    def remove_item(self, order: Order, item: OrderItem) -> None:
        """Delete a single line from an order."""
        ...
