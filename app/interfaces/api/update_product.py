"""Direct product update: secret-protected endpoint for external admin tools."""

import structlog
from fastapi import APIRouter, Depends

from app.application.services.auth_service import verify_admin_secret
from app.application.services.inventory_service import InventoryStore
from app.application.services.normalization import clean_text
from app.core.exceptions import BadRequestException
from app.domain.schemas.product import DirectUpdateRequest
from app.interfaces.deps import get_inventory

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Admin"])


@router.post("/update-product")
def update_product(body: DirectUpdateRequest, inventory: InventoryStore = Depends(get_inventory)):
    """Update one product by id. The body carries the product fields and the shared secret."""
    verify_admin_secret(body.secret)

    product_id = clean_text((body.product or {}).get("id"))
    if not product_id:
        raise BadRequestException("Producto inválido", details={"field": "product.id"})

    # The catalog may predate rows written by other tools
    if inventory.get(product_id) is None:
        inventory.refresh()

    inventory.update_product(product_id, body.product)
    logger.info("Product updated through direct endpoint", product_id=product_id)
    return {"success": True}
