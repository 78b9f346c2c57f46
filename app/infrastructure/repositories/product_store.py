"""
Product store implementations: SQL database (remote) and single JSON slot (local).
"""

from typing import Any, Callable, Dict, List

import structlog
from sqlalchemy import delete, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreError
from app.domain.models.product import Product
from app.domain.repositories.product_store import ProductStore
from app.domain.repositories.slot_store import SlotStore

logger = structlog.get_logger(__name__)

PRODUCTS_SLOT = "products_backup"

PRODUCT_COLUMNS = [
    "id",
    "name",
    "family",
    "subfamily",
    "price_1",
    "price_2",
    "price_3",
    "price_4",
    "stock",
    "supplier",
    "is_dollar",
    "exchange_rate",
]

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _row_to_dict(product: Product) -> Dict[str, Any]:
    row = {column: getattr(product, column) for column in PRODUCT_COLUMNS}
    row["updated_at"] = product.updated_at
    return row


class RemoteProductStore(ProductStore):
    """Product store backed by the `products` table."""

    supports_batches = True

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def select_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        try:
            with self.session_factory() as db:
                products = (
                    db.query(Product)
                    .order_by(Product.name.asc(), Product.id.asc())
                    .offset(offset)
                    .limit(limit)
                    .all()
                )
                return [_row_to_dict(p) for p in products]
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def write(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        try:
            with self.session_factory() as db:
                dialect = db.get_bind().dialect.name
                insert = _UPSERT_INSERTS.get(dialect)
                if insert is None:
                    raise StoreError(f"Upsert is not supported on '{dialect}'")

                stmt = insert(Product).values(
                    [{column: row.get(column) for column in PRODUCT_COLUMNS} for row in rows]
                )
                update_columns = {
                    column: stmt.excluded[column] for column in PRODUCT_COLUMNS if column != "id"
                }
                update_columns["updated_at"] = func.now()
                stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=update_columns)

                db.execute(stmt)
                db.commit()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def update(self, product_id: str, values: Dict[str, Any]) -> bool:
        changes = {k: v for k, v in values.items() if k in PRODUCT_COLUMNS and k != "id"}
        if not changes:
            return self._exists(product_id)
        try:
            with self.session_factory() as db:
                count = (
                    db.query(Product)
                    .filter(Product.id == product_id)
                    .update(changes, synchronize_session=False)
                )
                db.commit()
                return count > 0
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def delete_all(self) -> int:
        try:
            with self.session_factory() as db:
                result = db.execute(delete(Product))
                db.commit()
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def _exists(self, product_id: str) -> bool:
        try:
            with self.session_factory() as db:
                return db.get(Product, product_id) is not None
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e


class LocalProductStore(ProductStore):
    """Product store kept as one serialized snapshot in a slot."""

    supports_batches = False

    def __init__(self, slots: SlotStore, slot_name: str = PRODUCTS_SLOT):
        self.slots = slots
        self.slot_name = slot_name

    def _rows(self) -> List[Dict[str, Any]]:
        return self.slots.get(self.slot_name) or []

    def select_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        rows = sorted(self._rows(), key=lambda r: (str(r.get("name") or ""), str(r.get("id"))))
        return rows[offset:offset + limit]

    def write(self, rows: List[Dict[str, Any]]) -> None:
        self.slots.put(self.slot_name, [dict(row) for row in rows])
        logger.info("Local product snapshot written", products=len(rows))

    def update(self, product_id: str, values: Dict[str, Any]) -> bool:
        rows = self._rows()
        for row in rows:
            if row.get("id") == product_id:
                row.update({k: v for k, v in values.items() if k in PRODUCT_COLUMNS and k != "id"})
                self.slots.put(self.slot_name, rows)
                return True
        return False

    def delete_all(self) -> int:
        count = len(self._rows())
        self.slots.clear(self.slot_name)
        return count
