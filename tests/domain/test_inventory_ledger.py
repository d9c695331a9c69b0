"""Unit tests for the InventoryLedger domain service."""

import threading

import pytest

from shopcore.domain.exceptions import (
    AlreadyReleasedError,
    InsufficientStockError,
    InvalidQuantityError,
)
from shopcore.domain.model.product import Product
from shopcore.domain.model.reservation import ReservedLine
from shopcore.domain.model.value_objects import Money
from shopcore.domain.service.inventory_ledger import InventoryLedger
from tests.fakes import FakeProductRepository, FakeReservationRepository


def _make_ledger(
    *stock: tuple[str, int],
) -> tuple[InventoryLedger, FakeProductRepository, FakeReservationRepository]:
    """Build a ledger over products given as (product_id, stock_qty) tuples."""
    products = FakeProductRepository(
        [
            Product(id=pid, name=f"Product {pid}", price=Money.of("10.00"), stock_qty=qty)
            for pid, qty in stock
        ]
    )
    reservations = FakeReservationRepository()
    return InventoryLedger(products, reservations), products, reservations


class FlakyProductRepository(FakeProductRepository):
    """Fails the conditional decrement for one product, whatever its stock."""

    def __init__(self, products, failing_id: str) -> None:
        super().__init__(products)
        self._failing_id = failing_id

    def try_decrement_stock(self, product_id: str, quantity: int) -> bool:
        if product_id == self._failing_id:
            return False
        return super().try_decrement_stock(product_id, quantity)


class TestReserve:

    def test_decrements_every_product(self):
        ledger, products, _ = _make_ledger(("A", 10), ("B", 5))

        reservation = ledger.reserve([("A", 3), ("B", 5)])

        assert products.stock_of("A") == 7
        assert products.stock_of("B") == 0
        assert reservation.items == (ReservedLine("A", 3), ReservedLine("B", 5))
        assert not reservation.released

    def test_reservation_is_persisted(self):
        ledger, _, reservations = _make_ledger(("A", 10))
        reservation = ledger.reserve([("A", 1)])
        assert reservations.get_by_id(reservation.id) is not None

    def test_duplicate_products_are_merged(self):
        ledger, products, _ = _make_ledger(("A", 10))

        reservation = ledger.reserve([("A", 2), ("A", 4)])

        assert products.stock_of("A") == 4
        assert reservation.items == (ReservedLine("A", 6),)

    def test_exact_stock_can_be_reserved(self):
        ledger, products, _ = _make_ledger(("A", 4))
        ledger.reserve([("A", 4)])
        assert products.stock_of("A") == 0

    def test_insufficient_stock_rejected(self):
        ledger, products, reservations = _make_ledger(("A", 2))

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.reserve([("A", 3)])

        assert exc_info.value.product_ids == ["A"]
        assert products.stock_of("A") == 2
        assert reservations.count() == 0

    def test_no_partial_reservation_on_failure(self):
        """If A succeeds but B fails, A's decrement is rolled back."""
        ledger, products, _ = _make_ledger(("A", 10), ("B", 3), ("C", 10))

        with pytest.raises(InsufficientStockError, match="B"):
            ledger.reserve([("A", 5), ("B", 5), ("C", 5)])

        assert products.stock_of("A") == 10
        assert products.stock_of("B") == 3
        assert products.stock_of("C") == 10

    def test_reports_every_short_product(self):
        ledger, _, _ = _make_ledger(("A", 1), ("B", 10), ("C", 0))

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.reserve([("A", 2), ("B", 1), ("C", 1)])

        assert exc_info.value.product_ids == ["A", "C"]

    def test_unknown_product_counts_as_short(self):
        ledger, products, _ = _make_ledger(("A", 10))

        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.reserve([("A", 1), ("ghost", 1)])

        assert exc_info.value.product_ids == ["ghost"]
        assert products.stock_of("A") == 10

    def test_rollback_when_conditional_update_loses(self):
        products = FlakyProductRepository(
            [
                Product(id="A", name="A", price=Money.of("1.00"), stock_qty=5),
                Product(id="B", name="B", price=Money.of("1.00"), stock_qty=5),
            ],
            failing_id="B",
        )
        ledger = InventoryLedger(products, FakeReservationRepository())

        with pytest.raises(InsufficientStockError):
            ledger.reserve([("A", 2), ("B", 2)])

        assert products.stock_of("A") == 5

    def test_non_positive_quantity_rejected(self):
        ledger, products, _ = _make_ledger(("A", 10))
        with pytest.raises(InvalidQuantityError):
            ledger.reserve([("A", 0)])
        assert products.stock_of("A") == 10


class TestRelease:

    def test_restores_exactly_what_was_reserved(self):
        ledger, products, _ = _make_ledger(("A", 10), ("B", 5))
        reservation = ledger.reserve([("A", 3), ("B", 2)])

        ledger.release(reservation)

        assert products.stock_of("A") == 10
        assert products.stock_of("B") == 5
        assert reservation.released

    def test_second_release_rejected(self):
        ledger, products, _ = _make_ledger(("A", 10))
        reservation = ledger.reserve([("A", 3)])
        ledger.release(reservation)

        with pytest.raises(AlreadyReleasedError):
            ledger.release(reservation)

        assert products.stock_of("A") == 10

    def test_release_guard_uses_stored_flag(self):
        """A stale copy of the reservation cannot be released twice either."""
        ledger, products, reservations = _make_ledger(("A", 10))
        reservation = ledger.reserve([("A", 3)])
        stale_copy = reservations.get_by_id(reservation.id)

        ledger.release(reservation)
        with pytest.raises(AlreadyReleasedError):
            ledger.release(stale_copy)

        assert products.stock_of("A") == 10


class TestConcurrentReserve:

    def test_last_units_go_to_exactly_one_caller(self):
        ledger, products, _ = _make_ledger(("P", 10))
        barrier = threading.Barrier(2)
        outcomes: list[str] = []
        lock = threading.Lock()

        def attempt() -> None:
            barrier.wait()
            try:
                ledger.reserve([("P", 6)])
                result = "ok"
            except InsufficientStockError:
                result = "short"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["ok", "short"]
        assert products.stock_of("P") == 4

    def test_stock_never_negative_under_contention(self):
        ledger, products, _ = _make_ledger(("P", 25), ("Q", 25))
        barrier = threading.Barrier(20)
        successes: list[int] = []
        lock = threading.Lock()

        def attempt() -> None:
            barrier.wait()
            try:
                ledger.reserve([("P", 3), ("Q", 2)])
            except InsufficientStockError:
                return
            with lock:
                successes.append(1)

        threads = [threading.Thread(target=attempt) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert products.stock_of("P") == 25 - 3 * len(successes)
        assert products.stock_of("Q") == 25 - 2 * len(successes)
        assert products.stock_of("P") >= 0
        assert len(successes) == 8
