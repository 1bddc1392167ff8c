"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI

from storefront.config import get_settings
from storefront.infrastructure.database import engine, Base, SessionLocal
from storefront.core.logging import configure_logging
from storefront.core.middleware import setup_middleware
from storefront.core.exceptions import AppError, global_exception_handler

# Import all models so SQLAlchemy knows about them
from storefront.domain.models.user import User, Role  # noqa: F401
from storefront.domain.models.product import Product  # noqa: F401
from storefront.domain.models.order import Order, OrderItem  # noqa: F401

# Import routers
from storefront.interfaces.api.auth import router as auth_router
from storefront.interfaces.api.products import router as products_router
from storefront.interfaces.api.orders import router as orders_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


def ensure_default_admin() -> None:
    """Create the bootstrap admin account when configured and missing."""
    if not (settings.DEFAULT_ADMIN_EMAIL and settings.DEFAULT_ADMIN_PASSWORD):
        return

    from storefront.application.services.auth_service import get_user_by_email, register_user
    from storefront.domain.schemas.auth import UserCreate
    from storefront.infrastructure.repositories.unit_of_work import SQLAlchemyUnitOfWork

    db = SessionLocal()
    try:
        uow = SQLAlchemyUnitOfWork(db)
        if not get_user_by_email(uow.users, settings.DEFAULT_ADMIN_EMAIL):
            register_user(
                uow,
                UserCreate(
                    name="Admin",
                    email=settings.DEFAULT_ADMIN_EMAIL,
                    password=settings.DEFAULT_ADMIN_PASSWORD,
                ),
                role=Role.ADMIN,
            )
            logger.info("Default admin user created", email=settings.DEFAULT_ADMIN_EMAIL)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Storefront API...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only — use Alembic in production)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    ensure_default_admin()

    yield

    engine.dispose()
    logger.info("Storefront API stopped")


app = FastAPI(
    title="Storefront API",
    description="Backend toko online — pengguna, katalog produk dan pesanan",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app)

# AppError is answered by the exception middleware; anything else falls
# through to the server error handler
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(auth_router)
app.include_router(products_router)
app.include_router(orders_router)


@app.get("/")
def root():
    return {
        "name": "Storefront API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
