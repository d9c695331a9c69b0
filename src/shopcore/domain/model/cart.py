"""Cart aggregate, one per identity, keyed by ``owner_id``.

A cart holds at most one line per product. Adding a product that is
already present merges the quantities into the existing line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from shopcore.domain.exceptions import InvalidQuantityError
from shopcore.domain.model.value_objects import Quantity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CartItem:
    product_id: str
    quantity: Quantity


@dataclass
class Cart:
    """Aggregate root for a shopper's pending selection.

    Every mutating method refreshes ``updated_at``, including mutations
    that end up changing nothing (removing an absent product, clearing
    an empty cart).
    """

    owner_id: str
    items: list[CartItem] = field(default_factory=list)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Mutations ------------------------------------------------------------

    def add_item(self, product_id: str, quantity: int) -> None:
        qty = Quantity(quantity)
        existing = self._find_item(product_id)
        if existing is not None:
            existing.quantity = Quantity(existing.quantity.value + qty.value)
        else:
            self.items.append(CartItem(product_id=product_id, quantity=qty))
        self._touch()

    def remove_item(self, product_id: str) -> None:
        self.items = [item for item in self.items if item.product_id != product_id]
        self._touch()

    def set_quantity(self, product_id: str, quantity: int) -> None:
        """Set the exact quantity for a product.

        Any non-positive quantity removes the line.
        """
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise InvalidQuantityError(
                f"Quantity must be an integer, got {type(quantity).__name__}"
            )
        if quantity <= 0:
            self.remove_item(product_id)
            return

        existing = self._find_item(product_id)
        if existing is not None:
            existing.quantity = Quantity(quantity)
        else:
            self.items.append(CartItem(product_id=product_id, quantity=Quantity(quantity)))
        self._touch()

    def clear(self) -> None:
        self.items = []
        self._touch()

    # --- Computed properties --------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.items

    # --- Internal helpers -----------------------------------------------------

    def _find_item(self, product_id: str) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def _touch(self) -> None:
        self.updated_at = _utcnow()
