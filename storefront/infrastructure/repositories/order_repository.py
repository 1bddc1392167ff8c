"""
SQLAlchemy Implementation of Order Repository.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from storefront.domain.models.order import Order, OrderItem
from storefront.domain.repositories.order_repository import OrderRepository
from storefront.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyOrderRepository(SQLAlchemyRepository[Order], OrderRepository):
    """Order repository implementation using SQLAlchemy."""

    def get_by_id(self, id: int) -> Optional[Order]:
        stmt = select(Order).where(Order.id == id).options(selectinload(Order.items))
        return self.db.scalars(stmt).first()

    def get_for_update(self, id: int) -> Optional[Order]:
        stmt = (
            select(Order)
            .where(Order.id == id)
            .options(selectinload(Order.items))
            .with_for_update(of=Order)
        )
        return self.db.scalars(stmt).first()

    def list_by_user(self, user_id: int) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(selectinload(Order.items))
            .order_by(Order.id)
        )
        return list(self.db.scalars(stmt))

    def add_item(self, order: Order, item: OrderItem) -> OrderItem:
        order.items.append(item)
        self.db.flush()
        return item

    def remove_item(self, order: Order, item: OrderItem) -> None:
        # delete-orphan cascade removes the row
        order.items.remove(item)
        self.db.flush()
