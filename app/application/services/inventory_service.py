"""Inventory service: in-memory catalog loaded from the product store."""

import threading
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from app.application.services.normalization import normalize_changes
from app.config import get_settings
from app.core.exceptions import EntityNotFoundException, ProductWriteError, StoreError
from app.domain.repositories.product_store import ProductStore
from app.domain.schemas.product import ProductFilter, ProductRead

logger = structlog.get_logger(__name__)


class InventoryStore:
    """Holds the full product list for the catalog and the cart.

    Created once at startup and shared through the app state; `refresh()`
    reloads it after imports and failed edits.

    Routes run in worker threads. Reads use whichever list is current;
    refreshes and edits are serialized by `_lock`, so a refresh that started
    before an edit can never swap its older list in after it.
    """

    def __init__(self, store: ProductStore, page_size: Optional[int] = None):
        self.store = store
        self.page_size = page_size or get_settings().FETCH_PAGE_SIZE
        self.is_loading = False
        self._lock = threading.RLock()
        self._products: List[ProductRead] = []
        self._by_id: Dict[str, ProductRead] = {}

    @property
    def products(self) -> List[ProductRead]:
        return list(self._products)

    def _set_products(self, products: List[ProductRead]) -> None:
        with self._lock:
            self._by_id = {p.id: p for p in products}
            self._products = products

    def fetch(self) -> List[ProductRead]:
        """
        Read every product, one page at a time, ordered by name.

        Stops at the first short or empty page. A failing page ends the read
        and whatever was collected so far is returned.
        """
        self.is_loading = True
        collected: List[ProductRead] = []
        offset = 0
        try:
            while True:
                try:
                    page = self.store.select_page(offset, self.page_size)
                except StoreError as e:
                    logger.error(
                        "Product page fetch failed",
                        offset=offset,
                        collected=len(collected),
                        error=str(e),
                    )
                    break

                for row in page:
                    try:
                        collected.append(ProductRead.model_validate(row))
                    except ValidationError as e:
                        logger.warning("Skipping invalid product row", product_id=row.get("id"), error=str(e))

                if len(page) < self.page_size:
                    break
                offset += self.page_size
        finally:
            self.is_loading = False

        logger.info("Products fetched", products=len(collected), pages=offset // self.page_size + 1)
        return collected

    def refresh(self) -> List[ProductRead]:
        # Held across fetch and swap: edits wait for the new list
        with self._lock:
            self._set_products(self.fetch())
            return self.products

    def get(self, product_id: str) -> Optional[ProductRead]:
        return self._by_id.get(product_id)

    def search(self, filters: ProductFilter) -> List[ProductRead]:
        """Public catalog listing. Products without stock are hidden unless asked for."""
        term = (filters.search or "").strip().lower()
        family = (filters.family or "").strip().lower()

        results = []
        for product in self._products:
            if not filters.include_out_of_stock and product.stock <= 0:
                continue
            if family and (product.family or "").lower() != family:
                continue
            if term and not (
                term in product.name.lower()
                or term in (product.subfamily or "").lower()
                or term in product.id.lower()
            ):
                continue
            results.append(product)
        return results

    def admin_search(self, term: Optional[str] = None) -> List[ProductRead]:
        """Admin listing: every product, matched on name or code."""
        term = (term or "").strip().lower()
        if not term:
            return self.products
        return [p for p in self._products if term in p.name.lower() or term in p.id.lower()]

    def families(self) -> List[str]:
        return sorted({p.family for p in self._products if p.family})

    def update_product(self, product_id: str, changes: Dict[str, Any]) -> ProductRead:
        """
        Edit one product in place.

        The in-memory copy is replaced first; if the store rejects the write
        the whole list is fetched again and ProductWriteError is raised.
        Waits for any refresh in progress.
        """
        with self._lock:
            current = self.get(product_id)
            if current is None:
                raise EntityNotFoundException(
                    f"Producto '{product_id}' no encontrado",
                    details={"product_id": product_id},
                )

            values = normalize_changes(changes)
            values.pop("id", None)
            updated = current.model_copy(update=values)
            self._set_products([updated if p.id == product_id else p for p in self._products])

            try:
                found = self.store.update(product_id, values)
            except StoreError as e:
                logger.error("Product update failed", product_id=product_id, error=str(e))
                self.refresh()
                raise ProductWriteError(
                    f"No se pudo guardar el producto '{product_id}': {e}",
                    details={"product_id": product_id},
                ) from e

            if not found:
                self.refresh()
                raise EntityNotFoundException(
                    f"Producto '{product_id}' no encontrado",
                    details={"product_id": product_id},
                )

        logger.info("Product updated", product_id=product_id, fields=sorted(values))
        return updated
