"""Composition root. Wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions. Configuration is read
from the environment here and nowhere else.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import Engine

from shopcore.application.cart_store import CartStore
from shopcore.application.order_engine import OrderEngine
from shopcore.domain.exceptions import ValidationError
from shopcore.domain.service.inventory_ledger import InventoryLedger
from shopcore.infrastructure.persistence.database import create_schema, make_engine
from shopcore.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from shopcore.infrastructure.persistence.sql_order_repository import (
    SqlOrderRepository,
)
from shopcore.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from shopcore.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_tokens: dict[str, str]


def parse_api_tokens(raw: str) -> dict[str, str]:
    """Parse 'token:owner,token:owner' into {token: owner_id}."""
    tokens: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if ":" not in pair:
            raise ValidationError(
                f"Invalid token entry '{pair}'. Expected 'token:owner_id'."
            )
        token, owner_id = pair.split(":", 1)
        tokens[token.strip()] = owner_id.strip()
    return tokens


def load_settings() -> Settings:
    default_url = f"sqlite:///{_DATA_DIR / 'shopcore.db'}"
    return Settings(
        database_url=os.environ.get("SHOPCORE_DATABASE_URL", default_url),
        api_tokens=parse_api_tokens(os.environ.get("SHOPCORE_API_TOKENS", "")),
    )


class Container:
    """Holds one engine and hands out repositories and services built on it."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.product_repo = SqlProductRepository(engine)
        self.cart_repo = SqlCartRepository(engine)
        self.order_repo = SqlOrderRepository(engine)
        self.reservation_repo = SqlReservationRepository(engine)

    @classmethod
    def from_url(cls, database_url: str) -> Container:
        if database_url.startswith("sqlite:///") and database_url != "sqlite:///:memory:":
            Path(database_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
        engine = make_engine(database_url)
        create_schema(engine)
        return cls(engine)

    def inventory_ledger(self) -> InventoryLedger:
        return InventoryLedger(self.product_repo, self.reservation_repo)

    def cart_store(self) -> CartStore:
        return CartStore(self.cart_repo, self.product_repo)

    def order_engine(self) -> OrderEngine:
        return OrderEngine(
            order_repo=self.order_repo,
            cart_repo=self.cart_repo,
            product_repo=self.product_repo,
            reservation_repo=self.reservation_repo,
            ledger=self.inventory_ledger(),
        )


def container() -> Container:
    return Container.from_url(load_settings().database_url)
