"""Reservation: the exact set of stock decrements one order caused.

Cancellation reverses a Reservation rather than recomputing what to
give back from the order's line items.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ReservedLine:
    product_id: str
    quantity: int


@dataclass
class Reservation:
    id: str
    items: tuple[ReservedLine, ...]
    released: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    released_at: datetime | None = None

    @staticmethod
    def new(items: list[ReservedLine]) -> Reservation:
        return Reservation(id=uuid.uuid4().hex, items=tuple(items))
