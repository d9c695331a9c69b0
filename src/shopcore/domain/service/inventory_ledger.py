"""Domain service: Inventory Ledger.

The ledger is the only code path that moves ``stock_qty`` for orders.
It never reads a stock level and writes back a computed one; every
decrement is a conditional update executed by the repository
(``stock_qty >= quantity`` checked and applied in one step), so the
guarantee holds across independent server processes sharing one store.

A multi-product reservation is made observably all-or-nothing by
compensation: when a later product cannot be decremented, the products
already decremented in the same call are credited back before the
failure is reported.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from shopcore.domain.exceptions import (
    AlreadyReleasedError,
    InsufficientStockError,
    ValidationError,
)
from shopcore.domain.model.reservation import Reservation, ReservedLine
from shopcore.domain.model.value_objects import Quantity
from shopcore.domain.repository.product_repository import ProductRepository
from shopcore.domain.repository.reservation_repository import (
    ReservationRepository,
)

logger = structlog.get_logger(__name__)


class InventoryLedger:

    def __init__(
        self,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
    ) -> None:
        self._product_repo = product_repo
        self._reservation_repo = reservation_repo

    def reserve(self, items: list[tuple[str, int]]) -> Reservation:
        """Decrement stock for every ``(product_id, quantity)`` pair, or none.

        Pairs naming the same product are merged first so each product
        sees exactly one conditional decrement.

        Raises InsufficientStockError listing the product(s) that could
        not cover the request.
        """
        lines = self._merge(items)
        if not lines:
            raise ValidationError("Nothing to reserve")

        applied: list[ReservedLine] = []
        for index, line in enumerate(lines):
            if self._product_repo.try_decrement_stock(line.product_id, line.quantity):
                applied.append(line)
                continue

            self._restore(applied)
            short = [line.product_id] + self._also_short(lines[index + 1:])
            logger.info(
                "Stock reservation rejected",
                short_product_ids=short,
                requested={ln.product_id: ln.quantity for ln in lines},
            )
            raise InsufficientStockError(short)

        reservation = Reservation.new(applied)
        try:
            self._reservation_repo.add(reservation)
        except Exception:
            self._restore(applied)
            raise

        logger.info(
            "Stock reserved",
            reservation_id=reservation.id,
            lines=len(reservation.items),
        )
        return reservation

    def release(self, reservation: Reservation) -> None:
        """Credit back exactly what ``reservation`` decremented, once.

        The release flag is claimed before any stock moves, so two
        concurrent releases of the same reservation cannot both credit.
        """
        claimed = self._reservation_repo.mark_released(
            reservation.id, datetime.now(timezone.utc)
        )
        if not claimed:
            raise AlreadyReleasedError(
                f"Reservation {reservation.id} has already been released"
            )

        self._restore(list(reservation.items))
        reservation.released = True
        logger.info("Stock released", reservation_id=reservation.id)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _merge(items: list[tuple[str, int]]) -> list[ReservedLine]:
        totals: dict[str, int] = {}
        for product_id, quantity in items:
            qty = Quantity(quantity)
            totals[product_id] = totals.get(product_id, 0) + qty.value
        return [ReservedLine(product_id=pid, quantity=qty) for pid, qty in totals.items()]

    def _restore(self, lines: list[ReservedLine]) -> None:
        for line in reversed(lines):
            self._product_repo.increment_stock(line.product_id, line.quantity)

    def _also_short(self, remaining: list[ReservedLine]) -> list[str]:
        """Best-effort report of other products that would also have failed."""
        short: list[str] = []
        for line in remaining:
            product = self._product_repo.get_by_id(line.product_id)
            if product is None or product.stock_qty < line.quantity:
                short.append(line.product_id)
        return short
