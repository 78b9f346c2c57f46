"""Cart service: per-session quote cart with write-through persistence.

Quantities are always clamped to the known stock; a line that reaches zero is
removed. Lines quoted under tier 4 form the "special" partition and lines
under tiers 1-3 the "general" one; both live in the same cart.
"""

from typing import List, Optional

import structlog
from pydantic import ValidationError

from app.application.services.inventory_service import InventoryStore
from app.core.exceptions import StoreError
from app.domain.pricing import CartScope, PriceTier
from app.domain.repositories.slot_store import SlotStore
from app.domain.schemas.cart import CartLine
from app.domain.schemas.product import ProductBase

logger = structlog.get_logger(__name__)

SNAPSHOT_FIELDS = set(ProductBase.model_fields)


def cart_slot_name(session_id: str) -> str:
    return f"cart_{session_id}"


def _line_for(product: ProductBase, quantity: int, tier: PriceTier) -> CartLine:
    snapshot = product.model_dump(include=SNAPSHOT_FIELDS)
    return CartLine(
        **snapshot,
        quantity=quantity,
        selected_price=product.price_for(tier),
        selected_list_id=tier,
    )


class CartEngine:
    """Quote cart of one session. Every mutation is saved before returning."""

    def __init__(self, slots: SlotStore, session_id: str, inventory: InventoryStore):
        self.slots = slots
        self.session_id = session_id
        self.inventory = inventory
        self._lines: List[CartLine] = self._load()

    def _load(self) -> List[CartLine]:
        try:
            saved = self.slots.get(cart_slot_name(self.session_id)) or []
        except StoreError as e:
            logger.warning("Cart could not be loaded, starting empty", session=self.session_id, error=str(e))
            return []

        lines = []
        for item in saved:
            try:
                lines.append(CartLine.model_validate(item))
            except ValidationError as e:
                logger.warning("Dropping invalid cart line", session=self.session_id, error=str(e))
        return lines

    def _persist(self) -> None:
        self.slots.put(
            cart_slot_name(self.session_id),
            [line.model_dump(mode="json") for line in self._lines],
        )

    def _index(self, product_id: str) -> Optional[int]:
        for i, line in enumerate(self._lines):
            if line.id == product_id:
                return i
        return None

    def lines(self, scope: CartScope = CartScope.ALL) -> List[CartLine]:
        return [line for line in self._lines if scope.includes(line.selected_list_id)]

    def total(self, scope: CartScope = CartScope.ALL) -> float:
        return sum(line.subtotal for line in self.lines(scope))

    @property
    def cart_total(self) -> float:
        """Sum of price × quantity over every line, both partitions."""
        return self.total(CartScope.ALL)

    def add_to_cart(self, product: ProductBase, quantity: int, list_id: PriceTier | int) -> Optional[CartLine]:
        """
        Add `quantity` units of `product` quoted under `list_id`.

        If the product is already in the cart its quantity grows (up to the
        stock) and the line moves to the requested tier and price. A new line
        is only created when at least one unit is available.

        Returns:
            The resulting line, or None if nothing is in the cart for it
        """
        tier = PriceTier(list_id)
        index = self._index(product.id)

        if index is not None:
            new_quantity = max(0, min(self._lines[index].quantity + quantity, product.stock))
            if new_quantity == 0:
                del self._lines[index]
                self._persist()
                return None
            line = _line_for(product, new_quantity, tier)
            self._lines[index] = line
        else:
            safe_quantity = min(quantity, product.stock)
            if safe_quantity <= 0:
                return None
            line = _line_for(product, safe_quantity, tier)
            self._lines.append(line)

        self._persist()
        logger.debug("Cart line set", session=self.session_id, product_id=product.id, quantity=line.quantity, tier=int(tier))
        return line

    def remove_from_cart(self, product_id: str) -> None:
        self._lines = [line for line in self._lines if line.id != product_id]
        self._persist()

    def update_cart_quantity(self, product_id: str, quantity: int) -> Optional[CartLine]:
        """
        Set the quantity of a line, clamped to [0, stock].

        Stock is read from the catalog; if the product left the catalog, the
        stock stored on the line is used. Quantity 0 removes the line.
        """
        index = self._index(product_id)
        if index is None:
            return None

        line = self._lines[index]
        product = self.inventory.get(product_id)
        max_stock = product.stock if product is not None else line.stock
        new_quantity = min(max(0, quantity), max_stock)

        if new_quantity == 0:
            del self._lines[index]
            self._persist()
            return None

        line = line.model_copy(update={"quantity": new_quantity})
        self._lines[index] = line
        self._persist()
        return line

    def update_cart_prices(self, list_id: PriceTier | int, scope: CartScope = CartScope.ALL) -> List[CartLine]:
        """
        Re-quote lines under `list_id` with current catalog prices and stock.

        Lines whose product is no longer in the catalog are left as they are.
        """
        tier = PriceTier(list_id)
        lines = []
        for line in self._lines:
            product = self.inventory.get(line.id)
            if product is None or not scope.includes(line.selected_list_id):
                lines.append(line)
                continue
            quantity = min(line.quantity, product.stock)
            if quantity > 0:
                lines.append(_line_for(product, quantity, tier))

        self._lines = lines
        self._persist()
        return self.lines()

    def clear_cart(self, scope: CartScope = CartScope.ALL) -> int:
        """Remove the lines of one partition (or all). Returns how many were removed."""
        kept = [line for line in self._lines if not scope.includes(line.selected_list_id)]
        removed = len(self._lines) - len(kept)
        self._lines = kept
        self._persist()
        logger.info("Cart cleared", session=self.session_id, scope=scope.value, removed=removed)
        return removed
