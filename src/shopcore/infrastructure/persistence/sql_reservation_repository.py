"""SQL-backed implementation of ReservationRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from shopcore.domain.model.reservation import Reservation, ReservedLine
from shopcore.domain.repository.reservation_repository import (
    ReservationRepository,
)
from shopcore.infrastructure.persistence.database import (
    as_utc,
    reservation_items,
    reservations,
)


class SqlReservationRepository(ReservationRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, reservation: Reservation) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                insert(reservations).values(
                    id=reservation.id,
                    released=reservation.released,
                    created_at=reservation.created_at,
                    released_at=reservation.released_at,
                )
            )
            conn.execute(
                insert(reservation_items),
                [
                    {
                        "reservation_id": reservation.id,
                        "product_id": line.product_id,
                        "quantity": line.quantity,
                    }
                    for line in reservation.items
                ],
            )

    def get_by_id(self, reservation_id: str) -> Reservation | None:
        with self._engine.connect() as conn:
            head = conn.execute(
                select(reservations).where(reservations.c.id == reservation_id)
            ).first()
            if head is None:
                return None
            rows = conn.execute(
                select(reservation_items).where(
                    reservation_items.c.reservation_id == reservation_id
                )
            ).all()

        return Reservation(
            id=head.id,
            items=tuple(
                ReservedLine(product_id=row.product_id, quantity=row.quantity)
                for row in rows
            ),
            released=head.released,
            created_at=as_utc(head.created_at),
            released_at=as_utc(head.released_at),
        )

    def mark_released(self, reservation_id: str, released_at: datetime) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(reservations)
                .where(reservations.c.id == reservation_id)
                .where(reservations.c.released.is_(False))
                .values(released=True, released_at=released_at)
            )
        return result.rowcount == 1
