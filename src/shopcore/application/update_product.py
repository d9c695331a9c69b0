"""Application service: change a product's price."""

from __future__ import annotations

import structlog

from shopcore.domain.exceptions import EntityNotFoundError
from shopcore.domain.model.value_objects import Money
from shopcore.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, product_id: str, new_price: str) -> None:
        """Reprice a product.

        Only the price columns are written, so a checkout that reserves
        stock in the meantime keeps its decrement. Orders already placed
        keep the unit price they captured.
        """
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        previous = product.price
        product.update_price(Money.of(new_price))
        self._product_repo.update_price(product_id, product.price)
        logger.info(
            "Product repriced",
            product_id=product_id,
            previous=str(previous),
            price=str(product.price),
        )
