"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory) live in the
infrastructure layer and in the test fakes.

No method writes back a whole product row. Catalog changes touch only
the columns they own, and the ledger uses the two conditional stock
operations below, which every implementation must apply atomically per
product.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shopcore.domain.model.product import Product
from shopcore.domain.model.value_objects import Money


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Insert a new product. Raises ValidationError if the ID is taken."""

    @abstractmethod
    def update_price(self, product_id: str, price: Money) -> None:
        """Change the price columns only; stock is left alone."""

    @abstractmethod
    def set_stock(self, product_id: str, quantity: int) -> None:
        """Overwrite the stock level in one statement (operator restock)."""

    @abstractmethod
    def try_decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Decrement stock by ``quantity`` only if at least that much is on hand.

        Returns False, leaving stock untouched, when the product is
        unknown or holds fewer than ``quantity`` units at the instant of
        the update.
        """

    @abstractmethod
    def increment_stock(self, product_id: str, quantity: int) -> None:
        """Add ``quantity`` units back to a product's stock."""
