"""Pydantic schemas for Product domain."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from storefront.domain.schemas.common import CamelModel


class ProductCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: int = Field(gt=0)
    stock: int = Field(ge=0)


class ProductRead(CamelModel):
    id: int
    name: str
    description: str
    price: int
    stock: int
    created_at: Optional[datetime] = None


class ProductSearch(CamelModel):
    product_id: int = Field(gt=0)
