"""Product service — catalog creation and lookup."""

from typing import List

import structlog

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.models.product import Product
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.schemas.product import ProductCreate

logger = structlog.get_logger(__name__)


def create_product(uow: UnitOfWork, body: ProductCreate) -> Product:
    """Add a product to the catalog; names are unique."""
    if body.price <= 0:
        raise ValidationError("Harga produk harus lebih dari 0")
    if body.stock < 0:
        raise ValidationError("Stok produk tidak boleh negatif")

    with uow:
        if uow.products.get_by_name(body.name):
            raise ValidationError(
                f'Produk dengan nama "{body.name}" sudah ada. Gunakan nama lain.'
            )
        product = uow.products.create(body)

    logger.info("product.created", product_id=product.id, name=product.name, stock=product.stock)
    return product


def list_products(products: ProductRepository, skip: int = 0, limit: int = 100) -> List[Product]:
    return products.list(skip=skip, limit=limit)


def get_product(products: ProductRepository, product_id: int) -> Product:
    product = products.get_by_id(product_id)
    if product is None:
        raise NotFoundError(f"Produk dengan ID {product_id} tidak ditemukan")
    return product
