"""
SQLAlchemy Unit of Work.
"""

import structlog
from sqlalchemy.orm import Session

from storefront.domain.models.order import Order
from storefront.domain.models.product import Product
from storefront.domain.models.user import User
from storefront.infrastructure.repositories.order_repository import SQLAlchemyOrderRepository
from storefront.infrastructure.repositories.product_repository import SQLAlchemyProductRepository
from storefront.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

logger = structlog.get_logger(__name__)


class SQLAlchemyUnitOfWork:
    """Bundles the repositories over one session and owns commit/rollback."""

    def __init__(self, db: Session):
        self.db = db
        self.users = SQLAlchemyUserRepository(db, User)
        self.products = SQLAlchemyProductRepository(db, Product)
        self.orders = SQLAlchemyOrderRepository(db, Order)

    def __enter__(self) -> "SQLAlchemyUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            logger.debug("Rolling back transaction", error=exc_type.__name__)
            self.rollback()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
