"""Abstract repository for Cart aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shopcore.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def get(self, owner_id: str) -> Cart | None:
        """Return the cart owned by ``owner_id``, or None if never created."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist the whole cart (last writer wins)."""
