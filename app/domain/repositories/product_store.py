"""
Product Store Interface.
Defines the storage capability used by the import pipeline and the catalog.
"""

from typing import Any, Dict, List, Protocol


class ProductStore(Protocol):
    """Tabular product storage keyed by product id.

    Implementations raise `app.core.exceptions.StoreError` when the backend
    fails. Rows are plain dicts with the columns of the products table.
    """

    #: When False the store keeps a single snapshot: `write` receives the whole
    #: product set in one call and replaces whatever was stored before.
    supports_batches: bool

    def select_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        """Return up to `limit` rows ordered by name, starting at `offset`."""
        ...

    def write(self, rows: List[Dict[str, Any]]) -> None:
        """Insert or update `rows` by id."""
        ...

    def update(self, product_id: str, values: Dict[str, Any]) -> bool:
        """Update a single row. Returns False when the id does not exist."""
        ...

    def delete_all(self) -> int:
        """Delete every row. Returns the number of rows removed, if known."""
        ...
