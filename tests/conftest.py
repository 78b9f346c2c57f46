"""Shared fixtures for storefront backend tests."""

import io

import pytest
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.application.services.inventory_service import InventoryStore
from app.core.exceptions import StoreError
from app.domain.models.product import Product  # noqa: F401  (registers the table)
from app.domain.schemas.product import ProductBase
from app.infrastructure.database import Base
from app.infrastructure.repositories.product_store import LocalProductStore, RemoteProductStore
from app.infrastructure.slots import JsonSlotStore

ARTICLE_HEADER = [
    "codart", "desart", "familia", "subfamilia",
    "pventa_1", "pventa_2", "pventa_3", "pventa_4",
]

STOCK_BANNER = [
    "EMPRESA DISTRIBUIDORA",
    "Listado de stock valorizado",
    "Depósito: Central",
    "Fecha: 01/10/2026",
    "Usuario: admin",
    "Filtro: todos los artículos",
    "-",
]


def make_articles_xlsx(rows: list[list]) -> bytes:
    """Article spreadsheet: header on the first row, one row per list."""
    wb = Workbook()
    ws = wb.active
    ws.append(ARTICLE_HEADER)
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def make_stock_xlsx(rows: list[list], header: list | None = None) -> bytes:
    """Stock spreadsheet: 7 banner rows, header on row 8 (Código, Denominación, Stock)."""
    wb = Workbook()
    ws = wb.active
    for line in STOCK_BANNER:
        ws.append([line])
    ws.append(header or ["Código", "Denominación", "Stock"])
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def make_product(product_id: str = "A1", **overrides) -> ProductBase:
    """Product with sensible defaults for tests."""
    data = {
        "id": product_id,
        "name": f"Producto {product_id}",
        "family": "Bebidas",
        "subfamily": "Vinos",
        "price_1": 100.0,
        "price_2": 90.0,
        "price_3": 80.0,
        "price_4": 70.0,
        "stock": 10,
    }
    data.update(overrides)
    return ProductBase(**data)


class FakeProductStore:
    """In-memory product store recording every call, with failure injection."""

    def __init__(self, supports_batches: bool = True):
        self.supports_batches = supports_batches
        self.rows: dict[str, dict] = {}
        self.write_calls: list[list[dict]] = []
        self.update_calls: list[tuple[str, dict]] = []
        self.page_calls: list[tuple[int, int]] = []
        self.fail_write_on_call: int | None = None  # 1-based
        self.fail_delete = False
        self.fail_update = False
        self.fail_page_at_offset: int | None = None

    def select_page(self, offset, limit):
        self.page_calls.append((offset, limit))
        if self.fail_page_at_offset is not None and offset >= self.fail_page_at_offset:
            raise StoreError("connection reset")
        rows = sorted(self.rows.values(), key=lambda r: (str(r.get("name") or ""), r["id"]))
        return [dict(r) for r in rows[offset:offset + limit]]

    def write(self, rows):
        self.write_calls.append(rows)
        if self.fail_write_on_call == len(self.write_calls):
            raise StoreError("timeout")
        if not self.supports_batches:
            self.rows = {}
        for row in rows:
            self.rows[row["id"]] = dict(row)

    def update(self, product_id, values):
        self.update_calls.append((product_id, values))
        if self.fail_update:
            raise StoreError("permission denied")
        if product_id not in self.rows:
            return False
        self.rows[product_id].update(values)
        return True

    def delete_all(self):
        if self.fail_delete:
            raise StoreError("permission denied")
        count = len(self.rows)
        self.rows = {}
        return count

    def seed(self, *products: ProductBase):
        for product in products:
            self.rows[product.id] = product.model_dump()


@pytest.fixture
def slots(tmp_path):
    return JsonSlotStore(str(tmp_path / "store"))


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def remote_store(session_factory):
    return RemoteProductStore(session_factory)


@pytest.fixture
def local_store(slots):
    return LocalProductStore(slots)


@pytest.fixture
def fake_store():
    return FakeProductStore()


@pytest.fixture
def inventory(fake_store):
    """Inventory over the fake store with three products loaded."""
    fake_store.seed(
        make_product("A1", name="Vino Tinto", stock=5),
        make_product("B2", name="Aceite", stock=3, family="Almacén", subfamily="Aceites"),
        make_product("C3", name="Cerveza", stock=0),
    )
    store = InventoryStore(fake_store, page_size=1000)
    store.refresh()
    return store
