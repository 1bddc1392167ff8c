"""Auth API routes — register, login, me."""

from fastapi import APIRouter, Depends, status

from storefront.application.services import auth_service
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.repositories.user_repository import UserRepository
from storefront.domain.schemas.auth import (
    LoginRequest,
    Principal,
    TokenResponse,
    UserCreate,
    UserRead,
)
from storefront.domain.schemas.common import ApiResponse
from storefront.interfaces.api.deps import get_current_principal
from storefront.interfaces.deps import get_uow, get_user_repository

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse[TokenResponse])
def login(body: LoginRequest, users: UserRepository = Depends(get_user_repository)):
    token = auth_service.login(users, body.email, body.password)
    return ApiResponse(message="Login berhasil", data=TokenResponse(token=token))


@router.post(
    "/register",
    response_model=ApiResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
)
def register(body: UserCreate, uow: UnitOfWork = Depends(get_uow)):
    user = auth_service.register_user(uow, body)
    return ApiResponse(message="Pengguna berhasil dibuat", data=UserRead.model_validate(user))


@router.get("/me", response_model=ApiResponse[UserRead])
def get_me(
    principal: Principal = Depends(get_current_principal),
    users: UserRepository = Depends(get_user_repository),
):
    user = users.get_by_id(principal.user_id)
    return ApiResponse(message="Pengguna berhasil ditemukan", data=UserRead.model_validate(user))
