"""Abstract repository for stock Reservations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from shopcore.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        """Persist a newly committed reservation."""

    @abstractmethod
    def get_by_id(self, reservation_id: str) -> Reservation | None:
        """Return a reservation by its ID, or None if not found."""

    @abstractmethod
    def mark_released(self, reservation_id: str, released_at: datetime) -> bool:
        """Flip ``released`` from False to True.

        Returns False if the reservation was already released (or does
        not exist), so exactly one caller ever wins the release.
        """
