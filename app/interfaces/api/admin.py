"""Admin API routes: spreadsheet import and product maintenance."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from app.application.services.bulk_store import delete_all_products
from app.application.services.import_service import ImportMode, import_catalog
from app.application.services.inventory_service import InventoryStore
from app.core.exceptions import BadRequestException
from app.domain.repositories.product_store import ProductStore
from app.domain.schemas.auth import AdminRead
from app.domain.schemas.product import ImportResult, ProductRead, ProductUpdate
from app.interfaces.api.deps import require_admin
from app.interfaces.deps import get_inventory, get_product_store

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

SPREADSHEET_EXTENSIONS = ("xlsx", "xlsm")


async def _read_spreadsheet(file: UploadFile, label: str) -> bytes:
    if not file.filename:
        raise BadRequestException(f"Archivo de {label} no informado", details={"file": label})

    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if ext not in SPREADSHEET_EXTENSIONS:
        raise BadRequestException(
            f"El archivo de {label} debe ser .xlsx",
            details={"file": label, "filename": file.filename},
        )

    return await file.read()


@router.post("/import", response_model=ImportResult)
async def import_spreadsheets(
    articles: UploadFile = File(...),
    stock: Optional[UploadFile] = File(None),
    mode: ImportMode = Form(ImportMode.UPSERT),
    store: ProductStore = Depends(get_product_store),
    inventory: InventoryStore = Depends(get_inventory),
    user: AdminRead = Depends(require_admin),
):
    """Import the article file (and optionally the stock file) into the catalog."""
    articles_content = await _read_spreadsheet(articles, "artículos")
    stock_content = await _read_spreadsheet(stock, "stock") if stock is not None else None

    logger.info(
        "Catalog import requested",
        user=user.username,
        mode=mode.value,
        articles_file=articles.filename,
        stock_file=stock.filename if stock is not None else None,
    )
    return await run_in_threadpool(
        import_catalog,
        store,
        inventory,
        articles_content,
        stock_content,
        mode,
    )


@router.get("/products", response_model=list[ProductRead])
def list_products(search: Optional[str] = None, inventory: InventoryStore = Depends(get_inventory)):
    """Every product (including out of stock), matched on name or code."""
    return inventory.admin_search(search)


@router.patch("/products/{product_id:path}", response_model=ProductRead)
def edit_product(
    product_id: str,
    body: ProductUpdate,
    inventory: InventoryStore = Depends(get_inventory),
):
    return inventory.update_product(product_id, body.model_dump(exclude_unset=True))


@router.post("/products/refresh")
def refresh_products(inventory: InventoryStore = Depends(get_inventory)):
    products = inventory.refresh()
    return {"products": len(products)}


@router.delete("/products")
def delete_products(
    store: ProductStore = Depends(get_product_store),
    inventory: InventoryStore = Depends(get_inventory),
    user: AdminRead = Depends(require_admin),
):
    deleted = delete_all_products(store)
    inventory.refresh()
    logger.info("Catalog cleared", user=user.username, deleted=deleted)
    return {"message": "Productos eliminados", "deleted_products": deleted}
