"""Orders API routes — place, read, pay, cancel, update and delete orders."""

from typing import List

from fastapi import APIRouter, Depends, status

from storefront.application.services import order_service
from storefront.domain.models.order import OrderStatus
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.schemas.auth import Principal
from storefront.domain.schemas.common import ApiResponse
from storefront.domain.schemas.order import (
    OrderCreate,
    OrderCreated,
    OrderDeleted,
    OrderRead,
    OrderStatusChange,
    OrderUpdate,
)
from storefront.interfaces.api.deps import get_current_principal
from storefront.interfaces.deps import get_uow

router = APIRouter(prefix="/order", tags=["Orders"])


@router.post(
    "",
    response_model=ApiResponse[OrderCreated],
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    body: OrderCreate,
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    created = order_service.create_order(uow, principal, body.order_items, body.total_price)
    return ApiResponse(message="Pesanan berhasil dibuat", data=created)


@router.get("", response_model=ApiResponse[List[OrderRead]])
def list_my_orders(
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    orders = order_service.get_user_orders(uow, principal)
    return ApiResponse(message="Pesanan berhasil diambil", data=orders)


@router.get("/{order_id}", response_model=ApiResponse[OrderRead])
def get_order(
    order_id: int,
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    order = order_service.get_order_by_id(uow, order_id, principal)
    return ApiResponse(message="Pesanan berhasil diambil", data=order)


@router.post("/{order_id}/pay-now", response_model=ApiResponse[OrderStatusChange])
def pay_order(
    order_id: int,
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    change = order_service.update_order_status(uow, order_id, principal, OrderStatus.DONE)
    return ApiResponse(message="Status pesanan berhasil diperbarui", data=change)


@router.post("/{order_id}/cancel", response_model=ApiResponse[OrderStatusChange])
def cancel_order(
    order_id: int,
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    change = order_service.update_order_status(uow, order_id, principal, OrderStatus.CANCELLED)
    return ApiResponse(message="Pesanan berhasil dibatalkan", data=change)


@router.put("/{order_id}", response_model=ApiResponse[OrderRead])
def update_order(
    order_id: int,
    body: OrderUpdate,
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    order = order_service.update_order_data(uow, order_id, principal, body.order_items)
    return ApiResponse(message="Pesanan berhasil diperbarui", data=order)


@router.delete("/{order_id}", response_model=ApiResponse[OrderDeleted])
def delete_order(
    order_id: int,
    uow: UnitOfWork = Depends(get_uow),
    principal: Principal = Depends(get_current_principal),
):
    deleted = order_service.delete_order(uow, order_id, principal)
    return ApiResponse(message="Pesanan berhasil dihapus", data=deleted)
