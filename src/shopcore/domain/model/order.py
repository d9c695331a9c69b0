"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items. Line items are
a frozen snapshot of product price and quantity taken when the cart is
converted; only ``status`` changes afterwards, and only along the
transitions listed in ``ALLOWED_TRANSITIONS``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from shopcore.domain.exceptions import InvalidTransitionError, ValidationError
from shopcore.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Cancellation is possible until the order ships.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for purchase orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules. The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    owner_id: str
    items: list[OrderLineItem]
    reservation_id: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.updated_at is None:
            self.updated_at = self.created_at

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        owner_id: str,
        items: list[OrderLineItem],
        reservation_id: str | None = None,
    ) -> Order:
        """Create a new pending order, enforcing all invariants."""
        if not owner_id:
            raise ValidationError("Order owner is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        return Order(
            id=None,
            owner_id=owner_id,
            items=list(items),
            reservation_id=reservation_id,
        )

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def check_transition(self, target: OrderStatus) -> None:
        """Raise InvalidTransitionError unless ``status -> target`` is allowed."""
        if not self.can_transition_to(target):
            if self.status == target == OrderStatus.CANCELLED:
                raise InvalidTransitionError(f"Order #{self.id} is already cancelled")
            raise InvalidTransitionError(
                f"Cannot move order #{self.id} from {self.status.value} "
                f"to {target.value}"
            )

    def transition_to(self, target: OrderStatus) -> OrderStatus:
        """Apply ``status -> target`` in memory and return the previous status.

        Persisting the change is the repository's job and must be done
        with a compare-and-swap against the returned previous status.
        """
        self.check_transition(target)
        previous = self.status
        self.status = target
        self.updated_at = datetime.now(timezone.utc)
        return previous

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        currency = self.items[0].unit_price.currency if self.items else "USD"
        result = Money.zero(currency)
        for item in self.items:
            result = result + item.line_total
        return result
