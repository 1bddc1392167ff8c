"""Pydantic schemas for User and Auth."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from storefront.domain.models.user import Role
from storefront.domain.schemas.common import CamelModel


class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone_number: Optional[str] = None
    address: Optional[str] = None


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Role
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    token: str
    token_type: str = "bearer"


class Principal(CamelModel):
    """The authenticated caller, passed explicitly into services."""

    user_id: int
    name: str
    email: str
    role: Role
    phone_number: Optional[str] = None
    address: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
