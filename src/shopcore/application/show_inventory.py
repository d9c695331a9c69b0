"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from shopcore.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    product_name: str
    price: str
    stock_qty: int


class ShowInventoryHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self) -> list[InventoryLineDTO]:
        products = sorted(self._product_repo.list_all(), key=lambda p: p.id)
        return [
            InventoryLineDTO(
                product_id=p.id,
                product_name=p.name,
                price=str(p.price),
                stock_qty=p.stock_qty,
            )
            for p in products
        ]
