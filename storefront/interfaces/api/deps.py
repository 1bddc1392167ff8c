"""FastAPI dependency — bearer token authentication."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.application.services.auth_service import resolve_principal
from storefront.core.exceptions import AuthenticationError
from storefront.domain.repositories.user_repository import UserRepository
from storefront.domain.schemas.auth import Principal
from storefront.interfaces.deps import get_user_repository

# auto_error=False so a missing header gets our own 401 message
security = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    users: UserRepository = Depends(get_user_repository),
) -> Principal:
    """Extract and validate the caller from the `Authorization: Bearer` header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Header Authorization hilang atau format tidak valid")
    return resolve_principal(users, credentials.credentials)
