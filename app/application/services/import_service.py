"""Import service: article + stock spreadsheets into the product store."""

from enum import Enum
from typing import Optional

import structlog

from app.application.services.bulk_store import replace_products, upsert_products
from app.application.services.consolidator import consolidate, count_matched_stock
from app.application.services.inventory_service import InventoryStore
from app.application.services.spreadsheet_parser import (
    SpreadsheetSource,
    parse_articles,
    parse_stock,
)
from app.core.exceptions import BusinessRuleViolationException
from app.domain.repositories.product_store import ProductStore
from app.domain.schemas.product import ImportResult

logger = structlog.get_logger(__name__)


class ImportMode(str, Enum):
    UPSERT = "upsert"
    REPLACE = "replace"


def import_catalog(
    store: ProductStore,
    inventory: InventoryStore,
    articles_file: SpreadsheetSource,
    stock_file: Optional[SpreadsheetSource] = None,
    mode: ImportMode = ImportMode.UPSERT,
    batch_size: Optional[int] = None,
) -> ImportResult:
    """
    Parse, consolidate and write a catalog import, then reload the inventory.

    Both files are parsed before anything is written, so a broken file never
    touches storage. Write errors propagate after the inventory is reloaded,
    so the catalog reflects whatever batches did land.
    """
    articles = parse_articles(articles_file)
    stocks = parse_stock(stock_file) if stock_file is not None else []

    if not articles:
        raise BusinessRuleViolationException(
            "El archivo de artículos no tiene productos",
            details={"articles": 0},
        )

    products = consolidate(articles, stocks)
    matched = count_matched_stock(products, stocks)
    logger.info(
        "Catalog consolidated",
        mode=mode.value,
        articles=len(articles),
        products=len(products),
        stock_rows=len(stocks),
        stock_matched=matched,
    )

    write = replace_products if mode is ImportMode.REPLACE else upsert_products
    try:
        batches = write(store, products, batch_size=batch_size)
    finally:
        inventory.refresh()

    return ImportResult(
        mode=mode.value,
        articles=len(articles),
        stock_rows=len(stocks),
        stock_matched=matched,
        stock_unmatched=len(stocks) - matched,
        products_written=len(products),
        batches=batches,
    )
