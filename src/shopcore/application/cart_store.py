"""Application service: per-identity cart.

Carts are single-owner, so mutations are plain load-modify-save with
last-writer-wins semantics; nothing here touches shared stock.
"""

from __future__ import annotations

from shopcore.application.dto import CartDTO, cart_to_dto
from shopcore.domain.exceptions import EntityNotFoundError
from shopcore.domain.model.cart import Cart
from shopcore.domain.model.value_objects import Quantity
from shopcore.domain.repository.cart_repository import CartRepository
from shopcore.domain.repository.product_repository import ProductRepository


class CartStore:

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    def get(self, owner_id: str) -> CartDTO:
        """Return the owner's cart, creating an empty one on first access."""
        cart = self._cart_repo.get(owner_id)
        if cart is None:
            cart = Cart(owner_id=owner_id)
            self._cart_repo.save(cart)
        return cart_to_dto(cart)

    def add(self, owner_id: str, product_id: str, quantity: int) -> CartDTO:
        """Add ``quantity`` units, merging with an existing line for the product."""
        Quantity(quantity)
        self._require_product(product_id)

        cart = self._load(owner_id)
        cart.add_item(product_id, quantity)
        self._cart_repo.save(cart)
        return cart_to_dto(cart)

    def remove(self, owner_id: str, product_id: str) -> CartDTO:
        """Drop the product's line; absent products are a no-op."""
        cart = self._load(owner_id)
        cart.remove_item(product_id)
        self._cart_repo.save(cart)
        return cart_to_dto(cart)

    def update(self, owner_id: str, product_id: str, quantity: int) -> CartDTO:
        """Set the exact quantity; zero or less removes the line."""
        if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0:
            self._require_product(product_id)

        cart = self._load(owner_id)
        cart.set_quantity(product_id, quantity)
        self._cart_repo.save(cart)
        return cart_to_dto(cart)

    def clear(self, owner_id: str) -> CartDTO:
        cart = self._load(owner_id)
        cart.clear()
        self._cart_repo.save(cart)
        return cart_to_dto(cart)

    # --- Internal helpers -----------------------------------------------------

    def _load(self, owner_id: str) -> Cart:
        return self._cart_repo.get(owner_id) or Cart(owner_id=owner_id)

    def _require_product(self, product_id: str) -> None:
        if self._product_repo.get_by_id(product_id) is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
