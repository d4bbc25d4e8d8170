"""Checkout API routes"""

import logging
from fastapi import APIRouter, HTTPException, Depends, Request

from ..models.checkout import CheckoutRequest, CheckoutResponse
from ..core.session import CartSession
from ..services.cart_engine import CheckoutError, EmptyCartError
from .dependencies import get_cart_session, get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    session: CartSession = Depends(get_cart_session),
):
    """
    Place an order for the session cart.

    The cart is emptied only when the order is created. On failure the cart
    is kept so the customer can retry.
    """
    try:
        order = await session.engine.checkout(request.customer)
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if not order.get("id"):
        return CheckoutResponse(
            success=False,
            order=order,
            error_message="Order service did not return an order id",
        )

    logger.info(f"Session {session.session_id} checked out order {order['id']}")
    return CheckoutResponse(success=True, order=order)


@router.get("/orders/{order_id}")
async def get_order(order_id: int, request: Request):
    """Get order details"""
    orders = get_session_manager(request).orders
    order = await orders.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
