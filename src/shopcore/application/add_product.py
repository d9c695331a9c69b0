"""Application service: Add Product use case."""

from __future__ import annotations

from shopcore.domain.exceptions import ValidationError
from shopcore.domain.model.product import Product
from shopcore.domain.model.value_objects import Money
from shopcore.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        name: str,
        price: str,
        stock_qty: int = 0,
    ) -> Product:
        """Add a new product to the catalog with an initial stock level."""
        if not product_id or not product_id.strip():
            raise ValidationError("Product ID is required")
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        if self._product_repo.get_by_id(product_id.strip()) is not None:
            raise ValidationError(f"Product '{product_id}' already exists")

        product = Product(
            id=product_id.strip(),
            name=name.strip(),
            price=Money.of(price),
            stock_qty=stock_qty,
        )
        if product.price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        self._product_repo.add(product)
        return product
