"""Auth service — JWT token management, password hashing and user registration."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from storefront.config import get_settings
from storefront.core.exceptions import AuthenticationError, ValidationError
from storefront.domain.models.user import Role, User
from storefront.domain.repositories.unit_of_work import UnitOfWork
from storefront.domain.repositories.user_repository import UserRepository
from storefront.domain.schemas.auth import Principal, UserCreate

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

LOGIN_FAILED = "Email atau password salah"

# Verified against when the email is unknown so both failures take as long
_DUMMY_HASH = pwd_context.hash("storefront-dummy-password")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def issue_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token binding the user's id, email and role."""
    return create_access_token(
        {
            "sub": user.email,
            "userId": user.id,
            "email": user.email,
            "role": user.role.value,
        },
        expires_delta,
    )


def decode_access_token(token: str) -> dict:
    """Verify a token's signature and expiry.

    Raises AuthenticationError with a distinct message for expired and
    otherwise invalid tokens.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        logger.warning("Token telah kedaluwarsa")
        raise AuthenticationError("Token telah kedaluwarsa")
    except JWTError:
        logger.warning("Token tidak valid")
        raise AuthenticationError("Token tidak valid")

    if not payload.get("email"):
        raise AuthenticationError("Token tidak valid")
    return payload


def authenticate_user(users: UserRepository, email: str, password: str) -> User:
    if not email or not password:
        raise ValidationError("Email dan password harus diisi")

    user = users.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.warning("Login failed", reason="unknown_email")
        raise AuthenticationError(LOGIN_FAILED)
    if not verify_password(password, user.password_hash):
        logger.warning("Login failed", reason="wrong_password", user_id=user.id)
        raise AuthenticationError(LOGIN_FAILED)
    return user


def login(users: UserRepository, email: str, password: str) -> str:
    user = authenticate_user(users, email, password)
    logger.info("user.logged_in", user_id=user.id)
    return issue_token(user)


def resolve_principal(users: UserRepository, token: str) -> Principal:
    """Turn a bearer token into the caller's identity."""
    payload = decode_access_token(token)
    user = users.get_by_email(payload["email"])
    if user is None:
        logger.warning("Pengguna tidak ditemukan", email=payload["email"])
        raise AuthenticationError("Pengguna tidak ditemukan")
    return to_principal(user)


def to_principal(user: User) -> Principal:
    return Principal(
        user_id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        phone_number=user.phone,
        address=user.address,
    )


def get_user_by_email(users: UserRepository, email: str) -> Optional[User]:
    return users.get_by_email(email)


def register_user(uow: UnitOfWork, body: UserCreate, role: Role = Role.HELPER) -> User:
    """Create an account. Only internal callers may grant a role other than HELPER."""
    with uow:
        if uow.users.get_by_email(body.email):
            raise ValidationError(f'Pengguna dengan email "{body.email}" sudah terdaftar')
        user = uow.users.add(
            User(
                name=body.name,
                email=body.email,
                password_hash=hash_password(body.password),
                phone=body.phone_number,
                address=body.address,
                role=role,
            )
        )
    logger.info("user.registered", user_id=user.id, role=user.role.value)
    return user
