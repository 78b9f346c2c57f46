"""Products API routes: public catalog."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.application.services.inventory_service import InventoryStore
from app.core.exceptions import EntityNotFoundException
from app.domain.pricing import PriceTier
from app.domain.schemas.product import CatalogItem, ProductFilter, ProductRead
from app.interfaces.deps import get_inventory

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=list[CatalogItem])
def list_products(
    search: Optional[str] = None,
    family: Optional[str] = None,
    list_id: int = Query(PriceTier.LIST_1.value, ge=1, le=4),
    include_out_of_stock: bool = False,
    inventory: InventoryStore = Depends(get_inventory),
):
    """Catalog listing priced under `list_id`. Out-of-stock products are hidden by default."""
    tier = PriceTier(list_id)
    filters = ProductFilter(search=search, family=family, include_out_of_stock=include_out_of_stock)
    return [
        CatalogItem(**p.model_dump(), tier=tier, price=p.price_for(tier))
        for p in inventory.search(filters)
    ]


@router.get("/families", response_model=list[str])
def list_families(inventory: InventoryStore = Depends(get_inventory)):
    return inventory.families()


@router.get("/status")
def catalog_status(inventory: InventoryStore = Depends(get_inventory)):
    return {"products": len(inventory.products), "is_loading": inventory.is_loading}


@router.get("/{product_id:path}", response_model=ProductRead)
def get_product(product_id: str, inventory: InventoryStore = Depends(get_inventory)):
    product = inventory.get(product_id)
    if product is None:
        raise EntityNotFoundException(
            f"Producto '{product_id}' no encontrado",
            details={"product_id": product_id},
        )
    return product
