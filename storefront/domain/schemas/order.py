"""Pydantic schemas for Order domain."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from storefront.domain.models.order import OrderStatus
from storefront.domain.schemas.common import CamelModel


class OrderItemIn(CamelModel):
    product_id: int
    quantity: int = Field(gt=0)


class OrderCreate(CamelModel):
    order_items: List[OrderItemIn] = []
    total_price: int = Field(gt=0)


class OrderUpdate(CamelModel):
    order_items: Optional[List[OrderItemIn]] = None
    # Accepted for compatibility, the total is always recomputed
    total_price: Optional[int] = None


class OrderItemRead(CamelModel):
    product_id: int
    product_name: Optional[str] = None
    product_price: Optional[int] = None
    quantity: int
    price: int
    total_price: int


class OrderRead(CamelModel):
    id: int
    user_id: int
    total_price: int
    status: OrderStatus
    customer_name: str
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    expired_at: datetime
    order_items: List[OrderItemRead]


class OrderCreated(CamelModel):
    order_id: int
    expired_time: datetime


class OrderStatusChange(CamelModel):
    order_id: int
    previous_status: OrderStatus
    new_status: OrderStatus


class OrderDeleted(CamelModel):
    order_id: int
