"""SQLAlchemy engine and table definitions.

One SQLAlchemy Core table per persisted collection. The repositories
issue single-statement conditional UPDATEs against these tables, which
is what keeps stock and status changes correct across processes.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    update,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("price", String(32), nullable=False),
    Column("currency", String(3), nullable=False, default="USD"),
    Column("stock_qty", Integer, nullable=False, default=0),
    CheckConstraint("stock_qty >= 0", name="ck_products_stock_non_negative"),
)

carts = Table(
    "carts",
    metadata,
    Column("owner_id", String(128), primary_key=True),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

cart_items = Table(
    "cart_items",
    metadata,
    Column("owner_id", String(128), ForeignKey("carts.owner_id"), primary_key=True),
    Column("product_id", String(64), primary_key=True),
    Column("quantity", Integer, nullable=False),
    Column("position", Integer, nullable=False),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(128), nullable=False, index=True),
    Column("status", String(16), nullable=False),
    Column("reservation_id", String(32), ForeignKey("reservations.id"), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

order_items = Table(
    "order_items",
    metadata,
    Column("order_id", Integer, ForeignKey("orders.id"), primary_key=True),
    Column("position", Integer, primary_key=True),
    Column("product_id", String(64), nullable=False),
    Column("product_name", String(200), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", String(32), nullable=False),
    Column("currency", String(3), nullable=False),
)

reservations = Table(
    "reservations",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("released", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("released_at", DateTime(timezone=True), nullable=True),
)

reservation_items = Table(
    "reservation_items",
    metadata,
    Column("reservation_id", String(32), ForeignKey("reservations.id"), primary_key=True),
    Column("product_id", String(64), primary_key=True),
    Column("quantity", Integer, nullable=False),
)


def make_engine(url: str, echo: bool = False) -> Engine:
    """Build an engine, with the SQLite tweaks needed for threaded servers."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    connect_args = {"check_same_thread": False, "timeout": 15}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, or every checkout sees an empty database.
        return create_engine(
            url, echo=echo, connect_args=connect_args, poolclass=StaticPool
        )
    return create_engine(url, echo=echo, connect_args=connect_args)


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; every timestamp we write is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def upsert(conn: Connection, table: Table, values: dict) -> None:
    """Insert a row, or overwrite the non-key columns if the key exists.

    SQLite and PostgreSQL do this in one ``INSERT .. ON CONFLICT``
    statement. Other backends update first and insert inside a
    savepoint, retrying the update if a concurrent insert won.
    """
    key = [column.name for column in table.primary_key.columns]
    changes = {name: value for name, value in values.items() if name not in key}

    dialect = {"sqlite": sqlite, "postgresql": postgresql}.get(conn.dialect.name)
    if dialect is not None:
        stmt = dialect.insert(table).values(**values)
        conn.execute(
            stmt.on_conflict_do_update(
                index_elements=key,
                set_={name: stmt.excluded[name] for name in changes},
            )
        )
        return

    match = [table.c[name] == values[name] for name in key]
    if conn.execute(update(table).where(*match).values(**changes)).rowcount:
        return
    try:
        with conn.begin_nested():
            conn.execute(table.insert().values(**values))
    except IntegrityError:
        conn.execute(update(table).where(*match).values(**changes))
