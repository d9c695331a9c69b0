"""Tests for the SQLAlchemy repositories against a SQLite file."""

import threading
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from shopcore.domain.exceptions import EntityNotFoundError, ValidationError
from shopcore.domain.model.cart import Cart
from shopcore.domain.model.order import Order, OrderLineItem, OrderStatus
from shopcore.domain.model.product import Product
from shopcore.domain.model.reservation import Reservation, ReservedLine
from shopcore.domain.model.value_objects import Money, Quantity
from shopcore.infrastructure.bootstrap import Container
from shopcore.infrastructure.persistence.database import carts


class TestProducts:

    def test_get_and_list(self, container):
        product = container.product_repo.get_by_id("P")
        assert product.name == "Widget"
        assert product.price == Money.of("15.00")
        assert [p.id for p in container.product_repo.list_all()] == ["P", "Q"]

    def test_get_unknown_returns_none(self, container):
        assert container.product_repo.get_by_id("nope") is None

    def test_add_duplicate_is_rejected(self, container):
        with pytest.raises(ValidationError, match="already exists"):
            container.product_repo.add(
                Product(id="P", name="Again", price=Money.of("1.00"), stock_qty=99)
            )
        assert container.product_repo.get_by_id("P").stock_qty == 10

    def test_update_price_leaves_stock_alone(self, container):
        repo = container.product_repo
        stale = repo.get_by_id("P")
        assert repo.try_decrement_stock("P", 6)

        repo.update_price(stale.id, Money.of("17.50"))

        fresh = repo.get_by_id("P")
        assert fresh.price == Money.of("17.50")
        assert fresh.stock_qty == 4

    def test_set_stock(self, container):
        container.product_repo.set_stock("Q", 42)
        assert container.product_repo.get_by_id("Q").stock_qty == 42

    def test_catalog_updates_on_unknown_product(self, container):
        with pytest.raises(EntityNotFoundError):
            container.product_repo.update_price("nope", Money.of("1.00"))
        with pytest.raises(EntityNotFoundError):
            container.product_repo.set_stock("nope", 1)

    def test_conditional_decrement(self, container):
        repo = container.product_repo
        assert repo.try_decrement_stock("P", 7) is True
        assert repo.try_decrement_stock("P", 4) is False
        assert repo.get_by_id("P").stock_qty == 3
        assert repo.try_decrement_stock("P", 3) is True
        assert repo.get_by_id("P").stock_qty == 0

    def test_decrement_unknown_product_fails(self, container):
        assert container.product_repo.try_decrement_stock("nope", 1) is False

    def test_increment(self, container):
        container.product_repo.increment_stock("Q", 3)
        assert container.product_repo.get_by_id("Q").stock_qty == 8

    def test_increment_unknown_product(self, container):
        with pytest.raises(EntityNotFoundError):
            container.product_repo.increment_stock("nope", 1)


class TestCarts:

    def test_missing_cart_is_none(self, container):
        assert container.cart_repo.get("alice") is None

    def test_round_trip_keeps_line_order(self, container):
        cart = Cart(owner_id="alice")
        cart.add_item("Q", 1)
        cart.add_item("P", 4)
        container.cart_repo.save(cart)

        loaded = container.cart_repo.get("alice")
        assert [(i.product_id, i.quantity.value) for i in loaded.items] == [
            ("Q", 1),
            ("P", 4),
        ]
        assert loaded.updated_at.tzinfo is not None

    def test_save_replaces_lines(self, container):
        cart = Cart(owner_id="alice")
        cart.add_item("P", 2)
        container.cart_repo.save(cart)

        cart.clear()
        container.cart_repo.save(cart)

        assert container.cart_repo.get("alice").items == []

    def test_second_new_cart_for_same_owner_overwrites(self, container):
        first = Cart(owner_id="alice")
        first.add_item("P", 2)
        container.cart_repo.save(first)

        second = Cart(owner_id="alice")
        second.add_item("Q", 1)
        container.cart_repo.save(second)

        loaded = container.cart_repo.get("alice")
        assert [(i.product_id, i.quantity.value) for i in loaded.items] == [("Q", 1)]
        with container.engine.connect() as conn:
            assert conn.execute(select(func.count()).select_from(carts)).scalar_one() == 1

    def test_concurrent_first_access_never_fails(self, container):
        store = container.cart_store()
        barrier = threading.Barrier(6)
        errors: list[Exception] = []

        def first_get():
            barrier.wait()
            try:
                store.get("alice")
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=first_get) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert container.cart_repo.get("alice").items == []


def _order(owner_id: str = "alice", reservation_id: str | None = None) -> Order:
    return Order.create(
        owner_id=owner_id,
        items=[
            OrderLineItem(
                product_id="P",
                product_name="Widget",
                quantity=Quantity(3),
                unit_price=Money.of("15.00"),
            )
        ],
        reservation_id=reservation_id,
    )


class TestOrders:

    def test_add_assigns_id_and_round_trips(self, container):
        order = _order(reservation_id="r1")
        container.order_repo.add(order)
        assert order.id is not None

        loaded = container.order_repo.get_by_id(order.id)
        assert loaded.owner_id == "alice"
        assert loaded.status == OrderStatus.PENDING
        assert loaded.reservation_id == "r1"
        assert loaded.items[0].unit_price == Money.of("15.00")
        assert loaded.total == Money.of("45.00")
        assert loaded.created_at.tzinfo is not None

    def test_get_unknown_returns_none(self, container):
        assert container.order_repo.get_by_id(404) is None

    def test_list_by_owner_most_recent_first(self, container):
        first, second, other = _order(), _order(), _order("bob")
        for order in (first, second, other):
            container.order_repo.add(order)

        listed = container.order_repo.list_by_owner("alice")
        assert [o.id for o in listed] == [second.id, first.id]

    def test_compare_and_set_status(self, container):
        order = _order()
        container.order_repo.add(order)
        now = datetime.now(timezone.utc)

        assert container.order_repo.compare_and_set_status(
            order.id, OrderStatus.PENDING, OrderStatus.PAID, now
        )
        assert not container.order_repo.compare_and_set_status(
            order.id, OrderStatus.PENDING, OrderStatus.CANCELLED, now
        )
        assert container.order_repo.get_by_id(order.id).status == OrderStatus.PAID


class TestReservations:

    def test_round_trip(self, container):
        reservation = Reservation.new(
            [ReservedLine("P", 3), ReservedLine("Q", 1)]
        )
        container.reservation_repo.add(reservation)

        loaded = container.reservation_repo.get_by_id(reservation.id)
        assert loaded.released is False
        assert set(loaded.items) == {ReservedLine("P", 3), ReservedLine("Q", 1)}

    def test_mark_released_only_once(self, container):
        reservation = Reservation.new([ReservedLine("P", 3)])
        container.reservation_repo.add(reservation)
        now = datetime.now(timezone.utc)

        assert container.reservation_repo.mark_released(reservation.id, now) is True
        assert container.reservation_repo.mark_released(reservation.id, now) is False

        loaded = container.reservation_repo.get_by_id(reservation.id)
        assert loaded.released is True
        assert loaded.released_at is not None

    def test_unknown_reservation(self, container):
        assert container.reservation_repo.get_by_id("nope") is None
        assert not container.reservation_repo.mark_released(
            "nope", datetime.now(timezone.utc)
        )


class TestContainer:

    def test_schema_survives_reopen(self, container, database_url):
        reopened = Container.from_url(database_url)
        try:
            assert reopened.product_repo.get_by_id("P").stock_qty == 10
        finally:
            reopened.engine.dispose()

    def test_in_memory_database_shares_one_connection(self):
        c = Container.from_url("sqlite:///:memory:")
        cart = Cart(owner_id="alice")
        c.cart_repo.save(cart)
        assert c.cart_repo.get("alice") is not None
