"""Product aggregate.

Products live independently of carts and orders. Price changes are a
catalog concern; ``stock_qty`` changes go through the InventoryLedger,
which relies on the repository's conditional updates rather than on
mutating this object.
"""

from __future__ import annotations

from dataclasses import dataclass

from shopcore.domain.exceptions import InvalidQuantityError, ValidationError
from shopcore.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog together with its on-hand stock.

    Invariant: ``stock_qty`` is never negative.
    """

    id: str
    name: str
    price: Money
    stock_qty: int = 0

    def __post_init__(self) -> None:
        _check_stock_level(self.stock_qty)

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def set_stock(self, quantity: int) -> None:
        """Overwrite the stock level (operator restock)."""
        _check_stock_level(quantity)
        self.stock_qty = quantity


def _check_stock_level(quantity: int) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        raise InvalidQuantityError(
            f"Stock level must be an integer, got {type(quantity).__name__}"
        )
    if quantity < 0:
        raise InvalidQuantityError("Stock level cannot be negative")
