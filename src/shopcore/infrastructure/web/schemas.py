"""Pydantic request/response schemas for the HTTP API.

These are external contracts, kept separate from the application DTOs.
Quantities are deliberately left unconstrained here so that a bad
quantity is rejected by the domain with an ``InvalidQuantity`` error
rather than by schema validation.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1

    model_config = {
        "json_schema_extra": {"examples": [{"product_id": "sku-001", "quantity": 2}]}
    }


class RemoveFromCartRequest(BaseModel):
    product_id: str


class UpdateCartItemRequest(BaseModel):
    product_id: str
    quantity: int


class CartItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    quantity: int


class CartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    owner_id: str
    items: list[CartItemSchema]
    updated_at: datetime


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateStatusRequest(BaseModel):
    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "paid"}]}}


class OrderLineItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    quantity: int
    unit_price: str
    line_total: str
    currency: str


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    status: str
    items: list[OrderLineItemSchema]
    total: str
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class ErrorResponse(BaseModel):
    error: str
    detail: str
    product_ids: list[str] | None = None
