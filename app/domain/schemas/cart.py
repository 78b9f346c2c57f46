"""Pydantic schemas for the quote cart."""

from typing import Optional

from pydantic import BaseModel, Field

from app.domain.pricing import CartScope, PriceTier
from app.domain.schemas.product import ProductBase


class CartLine(ProductBase):
    """Product snapshot taken when added, plus the quoted quantity and tier."""
    quantity: int
    selected_price: float
    selected_list_id: PriceTier

    @property
    def subtotal(self) -> float:
        return self.selected_price * self.quantity


class CartView(BaseModel):
    scope: CartScope
    items: list[CartLine]
    total: float
    cart_total: float


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1
    list_id: PriceTier = PriceTier.LIST_1


class UpdateQuantityRequest(BaseModel):
    quantity: int


class RepriceRequest(BaseModel):
    list_id: PriceTier
    scope: CartScope = CartScope.ALL


class QuoteRequest(BaseModel):
    client_name: Optional[str] = Field(default=None, max_length=120)
    scope: CartScope = CartScope.GENERAL


class ShareLinkResponse(BaseModel):
    url: str
    message: str
