"""
API Dependencies.

The stores are built once at startup (see app.main) and kept on app.state.
"""

from fastapi import Depends, Header, Request

from app.application.services.cart_service import CartEngine
from app.application.services.inventory_service import InventoryStore
from app.domain.repositories.product_store import ProductStore
from app.domain.repositories.slot_store import SlotStore


def get_slot_store(request: Request) -> SlotStore:
    return request.app.state.slots


def get_product_store(request: Request) -> ProductStore:
    return request.app.state.product_store


def get_inventory(request: Request) -> InventoryStore:
    return request.app.state.inventory


def get_cart_session(
    x_cart_session: str = Header(..., alias="X-Cart-Session", pattern=r"^[A-Za-z0-9_-]{1,64}$"),
) -> str:
    """Cart session id chosen by the client (one per browser)."""
    return x_cart_session


def get_cart(
    session_id: str = Depends(get_cart_session),
    slots: SlotStore = Depends(get_slot_store),
    inventory: InventoryStore = Depends(get_inventory),
) -> CartEngine:
    return CartEngine(slots, session_id, inventory)
