"""
API Dependencies.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from storefront.domain.models.product import Product
from storefront.domain.models.user import User
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.repositories.user_repository import UserRepository
from storefront.infrastructure.database import get_db
from storefront.infrastructure.repositories.product_repository import SQLAlchemyProductRepository
from storefront.infrastructure.repositories.unit_of_work import SQLAlchemyUnitOfWork
from storefront.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_uow(db: Session = Depends(get_db)) -> UnitOfWork:
    """Get a unit of work bound to the request's session."""
    return SQLAlchemyUnitOfWork(db)


def get_product_repository(db: Session = Depends(get_db)) -> ProductRepository:
    """Get product repository instance."""
    return SQLAlchemyProductRepository(db, Product)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)
