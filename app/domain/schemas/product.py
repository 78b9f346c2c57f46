"""Pydantic schemas for Product domain."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.domain.pricing import PriceTier, TIER_FIELDS


class ProductBase(BaseModel):
    id: str
    name: str
    family: Optional[str] = None
    subfamily: Optional[str] = None
    price_1: float = 0
    price_2: float = 0
    price_3: float = 0
    price_4: float = 0
    stock: int = 0
    supplier: Optional[str] = None
    is_dollar: bool = False
    exchange_rate: Optional[float] = None

    def price_for(self, tier: PriceTier | int) -> float:
        """Price of this product under `tier`. Raises ValueError outside 1..4."""
        return getattr(self, TIER_FIELDS[PriceTier(tier)])


class ProductRead(ProductBase):
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProductUpdate(BaseModel):
    """Admin edit of a single product. Only the fields sent are changed."""
    name: Optional[str] = None
    family: Optional[str] = None
    subfamily: Optional[str] = None
    price_1: Optional[float] = None
    price_2: Optional[float] = None
    price_3: Optional[float] = None
    price_4: Optional[float] = None
    stock: Optional[int] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    is_dollar: Optional[bool] = None
    exchange_rate: Optional[float] = None


class StockRecord(BaseModel):
    id: str
    stock: int = 0


class ProductFilter(BaseModel):
    search: Optional[str] = None
    family: Optional[str] = None
    include_out_of_stock: bool = False


class CatalogItem(ProductRead):
    """Product as listed in the catalog, with the price of the active tier."""
    tier: PriceTier
    price: float


class DirectUpdateRequest(BaseModel):
    """Body of the secret-protected update endpoint."""
    product: Optional[dict[str, Any]] = None
    secret: str = ""


class ImportResult(BaseModel):
    mode: str
    articles: int
    stock_rows: int
    stock_matched: int
    stock_unmatched: int
    products_written: int
    batches: int
