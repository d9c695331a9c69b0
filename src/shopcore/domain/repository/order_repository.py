"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from shopcore.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[Order]:
        """Return every order owned by ``owner_id``, most recent first."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order and assign its ID."""

    @abstractmethod
    def compare_and_set_status(
        self,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
        updated_at: datetime,
    ) -> bool:
        """Write ``new`` only if the stored status still equals ``expected``.

        Returns False when another writer changed the status first.
        """
