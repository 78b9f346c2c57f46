"""Bulk writes of the product set.

Handles:
- Normalizing every record before it is written
- Full replace: delete all rows, then upsert (aborted if the delete fails)
- Upsert in sequential batches keyed by id
- Stores without batching (local snapshot): one wholesale write
"""

from typing import Iterable, Mapping, Union

import structlog

from app.application.services.normalization import normalize_product
from app.config import get_settings
from app.core.exceptions import BatchWriteError, ProductDeleteError, StoreError
from app.domain.repositories.product_store import ProductStore
from app.domain.schemas.product import ProductBase

logger = structlog.get_logger(__name__)

ProductLike = Union[ProductBase, Mapping]


def _as_mapping(record: ProductLike) -> Mapping:
    return record.model_dump() if isinstance(record, ProductBase) else record


def normalize_products(products: Iterable[ProductLike]) -> list[dict]:
    return [normalize_product(_as_mapping(p)) for p in products]


def upsert_products(
    store: ProductStore,
    products: Iterable[ProductLike],
    batch_size: int | None = None,
) -> int:
    """
    Insert or update products by id.

    Batches are written one after the other. If a batch fails, BatchWriteError
    names its starting offset; batches written before it are not rolled back.

    Returns:
        Number of write calls issued
    """
    rows = normalize_products(products)
    if not rows:
        return 0

    if not store.supports_batches:
        try:
            store.write(rows)
        except StoreError as e:
            logger.error("Product snapshot write failed", products=len(rows), error=str(e))
            raise BatchWriteError(offset=0, reason=str(e)) from e
        return 1

    batch_size = batch_size or get_settings().IMPORT_BATCH_SIZE
    batches = 0
    for offset in range(0, len(rows), batch_size):
        batch = rows[offset:offset + batch_size]
        try:
            store.write(batch)
        except StoreError as e:
            logger.error("Product batch write failed", offset=offset, size=len(batch), error=str(e))
            raise BatchWriteError(offset=offset, reason=str(e), written=offset) from e
        batches += 1
        logger.debug("Product batch written", offset=offset, size=len(batch))

    logger.info("Products upserted", products=len(rows), batches=batches)
    return batches


def delete_all_products(store: ProductStore) -> int:
    """Remove every product. Raises ProductDeleteError on failure."""
    try:
        deleted = store.delete_all()
    except StoreError as e:
        logger.error("Product delete failed", error=str(e))
        raise ProductDeleteError(str(e)) from e
    logger.info("Products deleted", deleted=deleted)
    return deleted


def replace_products(
    store: ProductStore,
    products: Iterable[ProductLike],
    batch_size: int | None = None,
) -> int:
    """
    Replace the whole product set: delete everything, then upsert `products`.

    Nothing is written if the delete fails. If the process stops between the
    delete and the last batch, the table is left partially filled.
    """
    products = list(products)
    delete_all_products(store)
    return upsert_products(store, products, batch_size=batch_size)
