"""Products API routes — create, list, search."""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from storefront.application.services import product_service
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.schemas.auth import Principal
from storefront.domain.schemas.common import ApiResponse
from storefront.domain.schemas.product import ProductCreate, ProductRead, ProductSearch
from storefront.interfaces.api.deps import get_current_principal
from storefront.interfaces.deps import get_product_repository, get_uow

router = APIRouter(prefix="/product", tags=["Products"])


@router.post(
    "",
    response_model=ApiResponse[ProductRead],
    status_code=status.HTTP_201_CREATED,
)
def create_product(body: ProductCreate, uow: UnitOfWork = Depends(get_uow)):
    product = product_service.create_product(uow, body)
    return ApiResponse(message="Produk berhasil dibuat", data=ProductRead.model_validate(product))


@router.get("", response_model=ApiResponse[List[ProductRead]])
def list_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    repo: ProductRepository = Depends(get_product_repository),
    principal: Principal = Depends(get_current_principal),
):
    products = product_service.list_products(repo, skip=skip, limit=limit)
    return ApiResponse(
        message="Daftar produk berhasil diambil",
        data=[ProductRead.model_validate(p) for p in products],
    )


@router.post("/search", response_model=ApiResponse[ProductRead])
def search_product(
    body: ProductSearch,
    repo: ProductRepository = Depends(get_product_repository),
    principal: Principal = Depends(get_current_principal),
):
    product = product_service.get_product(repo, body.product_id)
    return ApiResponse(message="Produk berhasil diambil", data=ProductRead.model_validate(product))
