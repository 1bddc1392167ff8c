"""
Product Repository Interface.
Defines specific data access operations for Products.
"""

from typing import Iterable, List, Optional

from storefront.domain.repositories.base import BaseRepository
from storefront.domain.models.product import Product


class ProductRepository(BaseRepository[Product]):
    """Interface for Product-specific operations."""

    def get_by_name(self, name: str) -> Optional[Product]:
        """Get a product by its unique name."""
        ...

    def get_many(self, ids: Iterable[int], for_update: bool = False) -> List[Product]:
        """Get every product whose id is in `ids`, optionally row-locked."""
        ...

    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        """Decrement stock only if at least `quantity` is available.

        Returns False and changes nothing when stock is insufficient.
        """
        ...

    def release_stock(self, product_id: int, quantity: int) -> None:
        """Give `quantity` units back to the product's stock."""
        ...
