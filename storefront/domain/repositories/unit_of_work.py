"""
Unit of Work Interface.
Groups the repositories that share one transaction.
"""

from typing import Protocol

from storefront.domain.repositories.order_repository import OrderRepository
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.repositories.user_repository import UserRepository


class UnitOfWork(Protocol):
    """Transaction boundary for multi-repository operations.

    Used as a context manager: leaving the block normally commits, leaving
    it through an exception rolls every staged write back.
    """

    users: UserRepository
    products: ProductRepository
    orders: OrderRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
