"""Application service: cart-to-order conversion and the order lifecycle.

This is the only place that coordinates several aggregates at once
(Cart, Product, Reservation, Order). Stock moves exclusively through
the InventoryLedger; status changes are persisted with a
compare-and-swap so two concurrent updates can never silently
overwrite each other.
"""

from __future__ import annotations

import structlog

from shopcore.application.dto import OrderDTO, order_to_dto
from shopcore.domain.exceptions import (
    AlreadyReleasedError,
    EmptyCartError,
    EntityNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidTransitionError,
    ValidationError,
)
from shopcore.domain.model.order import Order, OrderLineItem, OrderStatus
from shopcore.domain.repository.cart_repository import CartRepository
from shopcore.domain.repository.order_repository import OrderRepository
from shopcore.domain.repository.product_repository import ProductRepository
from shopcore.domain.repository.reservation_repository import (
    ReservationRepository,
)
from shopcore.domain.service.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)


class OrderEngine:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
        ledger: InventoryLedger,
    ) -> None:
        self._order_repo = order_repo
        self._cart_repo = cart_repo
        self._product_repo = product_repo
        self._reservation_repo = reservation_repo
        self._ledger = ledger

    # --- Commands -------------------------------------------------------------

    def create_order(self, owner_id: str) -> OrderDTO:
        """Convert the owner's cart into a pending order.

        Steps:
        1. Snapshot each cart line with the product's *current* price.
        2. Reserve all quantities in one all-or-nothing ledger call.
        3. Persist the order with a reference to the reservation.
        4. Clear the cart.

        On InsufficientStockError nothing is persisted and the cart is
        left as it was.
        """
        cart = self._cart_repo.get(owner_id)
        if cart is None or cart.is_empty:
            raise EmptyCartError("Cannot create an order from an empty cart")

        line_items: list[OrderLineItem] = []
        missing: list[str] = []
        for item in cart.items:
            product = self._product_repo.get_by_id(item.product_id)
            if product is None:
                missing.append(item.product_id)
                continue
            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=product.price,  # <-- price snapshot
                )
            )
        if missing:
            # A product dropped from the catalog can never be reserved.
            raise InsufficientStockError(missing)

        reservation = self._ledger.reserve(
            [(line.product_id, line.quantity.value) for line in line_items]
        )

        try:
            order = Order.create(
                owner_id=owner_id,
                items=line_items,
                reservation_id=reservation.id,
            )
            self._order_repo.add(order)
        except Exception:
            self._ledger.release(reservation)
            raise

        cart.clear()
        self._cart_repo.save(cart)

        logger.info(
            "Order created",
            order_id=order.id,
            owner_id=owner_id,
            reservation_id=reservation.id,
            total=str(order.total),
        )
        return order_to_dto(order)

    def update_status(
        self,
        order_id: int,
        requesting_owner_id: str,
        target: OrderStatus | str,
    ) -> OrderDTO:
        """Move an order along the lifecycle.

        A ``cancelled`` target is routed through ``cancel_order`` so that
        stock is always given back.
        """
        target = self._parse_status(target)
        if target == OrderStatus.CANCELLED:
            return self.cancel_order(order_id, requesting_owner_id)

        order = self._load_owned(order_id, requesting_owner_id)
        previous = order.transition_to(target)
        self._commit_status(order, previous)

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=previous.value,
            to_status=target.value,
        )
        return order_to_dto(order)

    def cancel_order(self, order_id: int, requesting_owner_id: str) -> OrderDTO:
        """Cancel a pending or paid order and give its stock back.

        The status compare-and-swap is committed before the reservation
        is released: whichever concurrent writer wins the swap decides
        the order's fate, and stock is only credited for an order that
        really ended up cancelled.
        """
        order = self._load_owned(order_id, requesting_owner_id)
        previous = order.transition_to(OrderStatus.CANCELLED)

        reservation = None
        if order.reservation_id is not None:
            reservation = self._reservation_repo.get_by_id(order.reservation_id)
            if reservation is None:
                raise EntityNotFoundError(
                    f"Reservation {order.reservation_id} for order #{order.id} not found"
                )

        self._commit_status(order, previous)

        if reservation is not None:
            try:
                self._ledger.release(reservation)
            except Exception as exc:
                # Put the status back so the order still matches its stock.
                self._order_repo.compare_and_set_status(
                    order.id, OrderStatus.CANCELLED, previous, order.updated_at
                )
                if isinstance(exc, AlreadyReleasedError):
                    raise InvalidTransitionError(
                        f"Order #{order.id} is already cancelled"
                    ) from exc
                raise

        logger.info(
            "Order cancelled",
            order_id=order.id,
            from_status=previous.value,
            reservation_id=order.reservation_id,
        )
        return order_to_dto(order)

    # --- Queries --------------------------------------------------------------

    def get_order(self, order_id: int, requesting_owner_id: str) -> OrderDTO:
        return order_to_dto(self._load_owned(order_id, requesting_owner_id))

    def list_orders(self, owner_id: str) -> list[OrderDTO]:
        return [order_to_dto(order) for order in self._order_repo.list_by_owner(owner_id)]

    # --- Internal helpers -----------------------------------------------------

    def _load_owned(self, order_id: int, requesting_owner_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if order.owner_id != requesting_owner_id:
            raise ForbiddenError(f"Not allowed to access order #{order_id}")
        return order

    def _commit_status(self, order: Order, previous: OrderStatus) -> None:
        swapped = self._order_repo.compare_and_set_status(
            order.id,  # type: ignore[arg-type]
            previous,
            order.status,
            order.updated_at,  # type: ignore[arg-type]
        )
        if not swapped:
            logger.info(
                "Order status changed concurrently",
                order_id=order.id,
                expected=previous.value,
                attempted=order.status.value,
            )
            raise InvalidTransitionError(
                f"Order #{order.id} is no longer {previous.value}; "
                f"cannot move it to {order.status.value}"
            )

    @staticmethod
    def _parse_status(value: OrderStatus | str) -> OrderStatus:
        if isinstance(value, OrderStatus):
            return value
        try:
            return OrderStatus(str(value).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError(
                f"Unknown order status {value!r} (expected one of: {allowed})"
            ) from exc
