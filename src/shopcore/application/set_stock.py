"""Application service: Set Stock use case (operator restock)."""

from __future__ import annotations

import structlog

from shopcore.domain.exceptions import EntityNotFoundError
from shopcore.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class SetStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, product_id: str, quantity: int) -> None:
        """Overwrite the on-hand stock for a product.

        This is an administrative reset, not part of the order path; it
        is not coordinated with in-flight reservations.
        """
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

        previous = product.stock_qty
        product.set_stock(quantity)
        self._product_repo.set_stock(product_id, product.stock_qty)
        logger.info(
            "Stock level set",
            product_id=product_id,
            previous=previous,
            stock_qty=quantity,
        )
