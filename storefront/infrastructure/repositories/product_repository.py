"""
SQLAlchemy Implementation of Product Repository.
"""

from typing import Iterable, List, Optional

from sqlalchemy import select, update

from storefront.domain.models.product import Product
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyProductRepository(SQLAlchemyRepository[Product], ProductRepository):
    """Product repository implementation using SQLAlchemy."""

    def get_by_name(self, name: str) -> Optional[Product]:
        return self.db.scalars(select(Product).where(Product.name == name)).first()

    def get_many(self, ids: Iterable[int], for_update: bool = False) -> List[Product]:
        ids = sorted(set(ids))
        if not ids:
            return []
        # Locks are taken in id order so concurrent orders cannot deadlock
        stmt = select(Product).where(Product.id.in_(ids)).order_by(Product.id)
        if for_update:
            # Rows may already be in the session from an earlier unlocked read
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return list(self.db.scalars(stmt))

    def reserve_stock(self, product_id: int, quantity: int) -> bool:
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity),
            execution_options={"synchronize_session": False},
        )
        self._expire_stock(product_id)
        return result.rowcount == 1

    def release_stock(self, product_id: int, quantity: int) -> None:
        self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity),
            execution_options={"synchronize_session": False},
        )
        self._expire_stock(product_id)

    def _expire_stock(self, product_id: int) -> None:
        # The UPDATE bypasses the identity map; reload stock on next access
        product = self.db.identity_map.get(self.db.identity_key(Product, product_id))
        if product is not None:
            self.db.expire(product, ["stock"])
