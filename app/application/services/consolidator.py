"""Merge article rows and stock rows into the product set to import."""

from typing import Iterable

from app.domain.schemas.product import ProductBase, StockRecord


def consolidate(
    articles: Iterable[ProductBase],
    stocks: Iterable[StockRecord],
) -> list[ProductBase]:
    """
    Apply stock quantities onto articles by product code.

    - Articles are keyed by trimmed id; a repeated id keeps the last row but
      its first position.
    - Stock rows for codes that are not articles are ignored.
    - Articles without a stock row keep stock 0.

    Inputs are not modified.
    """
    products: dict[str, ProductBase] = {}
    for article in articles:
        code = article.id.strip()
        if code:
            products[code] = article.model_copy(update={"id": code})

    for record in stocks:
        product = products.get(record.id.strip())
        if product is not None:
            products[product.id] = product.model_copy(update={"stock": record.stock})

    return list(products.values())


def count_matched_stock(products: Iterable[ProductBase], stocks: Iterable[StockRecord]) -> int:
    """Number of stock rows whose code matches an article."""
    codes = {p.id for p in products}
    return sum(1 for record in stocks if record.id.strip() in codes)
