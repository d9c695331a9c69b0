"""FastAPI routes for carts and orders.

Endpoints are plain ``def`` functions: the services underneath do
blocking database I/O, so FastAPI runs them in its thread pool.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from shopcore.application.cart_store import CartStore
from shopcore.application.order_engine import OrderEngine
from shopcore.infrastructure.web.auth import current_owner
from shopcore.infrastructure.web.schemas import (
    AddToCartRequest,
    CartResponse,
    ErrorResponse,
    OrderResponse,
    RemoveFromCartRequest,
    UpdateCartItemRequest,
    UpdateStatusRequest,
)

OwnerId = Annotated[str, Depends(current_owner)]


def cart_store(request: Request) -> CartStore:
    return request.app.state.container.cart_store()


def order_engine(request: Request) -> OrderEngine:
    return request.app.state.container.order_engine()


Carts = Annotated[CartStore, Depends(cart_store)]
Orders = Annotated[OrderEngine, Depends(order_engine)]

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"], responses=_ERRORS)


@cart_router.get("", response_model=CartResponse)
def get_cart(owner_id: OwnerId, carts: Carts) -> CartResponse:
    return CartResponse.model_validate(carts.get(owner_id))


@cart_router.post("/add", response_model=CartResponse)
def add_to_cart(body: AddToCartRequest, owner_id: OwnerId, carts: Carts) -> CartResponse:
    return CartResponse.model_validate(carts.add(owner_id, body.product_id, body.quantity))


@cart_router.post("/remove", response_model=CartResponse)
def remove_from_cart(
    body: RemoveFromCartRequest, owner_id: OwnerId, carts: Carts
) -> CartResponse:
    return CartResponse.model_validate(carts.remove(owner_id, body.product_id))


@cart_router.put("/update", response_model=CartResponse)
def update_cart_item(
    body: UpdateCartItemRequest, owner_id: OwnerId, carts: Carts
) -> CartResponse:
    return CartResponse.model_validate(
        carts.update(owner_id, body.product_id, body.quantity)
    )


@cart_router.delete("/clear", response_model=CartResponse)
def clear_cart(owner_id: OwnerId, carts: Carts) -> CartResponse:
    return CartResponse.model_validate(carts.clear(owner_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"], responses=_ERRORS)


@order_router.post("", status_code=201, response_model=OrderResponse)
def create_order(owner_id: OwnerId, orders: Orders) -> OrderResponse:
    """Convert the caller's cart into a pending order, reserving stock."""
    return OrderResponse.model_validate(orders.create_order(owner_id))


@order_router.get("", response_model=list[OrderResponse])
def list_orders(owner_id: OwnerId, orders: Orders) -> list[OrderResponse]:
    return [OrderResponse.model_validate(dto) for dto in orders.list_orders(owner_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, owner_id: OwnerId, orders: Orders) -> OrderResponse:
    return OrderResponse.model_validate(orders.get_order(order_id, owner_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int, body: UpdateStatusRequest, owner_id: OwnerId, orders: Orders
) -> OrderResponse:
    return OrderResponse.model_validate(
        orders.update_status(order_id, owner_id, body.status)
    )


@order_router.delete("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: int, owner_id: OwnerId, orders: Orders) -> OrderResponse:
    """Cancel a pending or paid order and return its stock."""
    return OrderResponse.model_validate(orders.cancel_order(order_id, owner_id))
