"""SQL-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import IntegrityError

from shopcore.domain.exceptions import EntityNotFoundError, ValidationError
from shopcore.domain.model.product import Product
from shopcore.domain.model.value_objects import Money
from shopcore.domain.repository.product_repository import ProductRepository
from shopcore.infrastructure.persistence.database import products


class SqlProductRepository(ProductRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(products).where(products.c.id == product_id)
            ).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(products).order_by(products.c.id)).all()
        return [self._to_domain(row) for row in rows]

    def add(self, product: Product) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(products).values(id=product.id, **self._to_raw(product)))
        except IntegrityError as exc:
            raise ValidationError(f"Product '{product.id}' already exists") from exc

    def update_price(self, product_id: str, price: Money) -> None:
        self._update_one(
            product_id, price=str(price.amount), currency=price.currency
        )

    def set_stock(self, product_id: str, quantity: int) -> None:
        self._update_one(product_id, stock_qty=quantity)

    def try_decrement_stock(self, product_id: str, quantity: int) -> bool:
        # Check and decrement in one statement; the row lock does the rest.
        with self._engine.begin() as conn:
            result = conn.execute(
                update(products)
                .where(products.c.id == product_id)
                .where(products.c.stock_qty >= quantity)
                .values(stock_qty=products.c.stock_qty - quantity)
            )
        return result.rowcount == 1

    def increment_stock(self, product_id: str, quantity: int) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(products)
                .where(products.c.id == product_id)
                .values(stock_qty=products.c.stock_qty + quantity)
            )
        if result.rowcount == 0:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

    # --- Internal helpers -----------------------------------------------------

    def _update_one(self, product_id: str, **values) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(products).where(products.c.id == product_id).values(**values)
            )
        if result.rowcount == 0:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock_qty": product.stock_qty,
        }

    @staticmethod
    def _to_domain(row: Row) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(Decimal(row.price), row.currency),
            stock_qty=row.stock_qty,
        )
