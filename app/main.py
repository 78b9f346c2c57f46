"""FastAPI application: main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.core.exceptions import AppError, global_exception_handler
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.application.services.inventory_service import InventoryStore
from app.infrastructure.slots import JsonSlotStore
from app.infrastructure.repositories.product_store import LocalProductStore, RemoteProductStore

# Import routers
from app.interfaces.api.admin import router as admin_router
from app.interfaces.api.auth import router as auth_router
from app.interfaces.api.cart import router as cart_router
from app.interfaces.api.products import router as products_router
from app.interfaces.api.update_product import router as update_product_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


def build_stores(app: FastAPI) -> None:
    """Choose the product store once and load the catalog into memory."""
    slots = JsonSlotStore(settings.LOCAL_STORE_DIR)

    if settings.remote_storage_enabled:
        from app.infrastructure.database import get_engine, get_session_factory, init_db

        init_db(get_engine())
        product_store = RemoteProductStore(get_session_factory())
        logger.info("Using remote product store")
    else:
        product_store = LocalProductStore(slots)
        logger.warning(
            "DATABASE_URL not set, products are kept in the local snapshot",
            directory=settings.LOCAL_STORE_DIR,
        )

    inventory = InventoryStore(product_store)
    inventory.refresh()

    app.state.slots = slots
    app.state.product_store = product_store
    app.state.inventory = inventory


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting storefront backend...", env=settings.ENVIRONMENT)
    build_stores(app)
    logger.info("Catalog loaded", products=len(app.state.inventory.products))

    yield

    logger.info("Storefront backend stopped")


app = FastAPI(
    title="Distribuidora: Catálogo mayorista",
    description="API Backend: catálogo con listas de precios, presupuestos e importación de planillas",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging, CORS)
setup_middleware(app)

# Global Exception Handling
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Include routers
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(admin_router)
app.include_router(update_product_router)


@app.get("/")
def root():
    return {
        "name": "Distribuidora Storefront",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
