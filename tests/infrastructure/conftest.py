"""Fixtures for tests that run against a real SQLite file."""

import pytest

from shopcore.domain.model.product import Product
from shopcore.domain.model.value_objects import Money
from shopcore.infrastructure.bootstrap import Container


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'shopcore.db'}"


@pytest.fixture
def container(database_url):
    c = Container.from_url(database_url)
    c.product_repo.add(
        Product(id="P", name="Widget", price=Money.of("15.00"), stock_qty=10)
    )
    c.product_repo.add(
        Product(id="Q", name="Gadget", price=Money.of("25.00"), stock_qty=5)
    )
    yield c
    c.engine.dispose()
