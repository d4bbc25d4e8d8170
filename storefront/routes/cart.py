"""Cart API routes"""

from fastapi import APIRouter, Depends

from ..models.cart import (
    AddToCartRequest,
    ApplyCouponRequest,
    CartResponse,
    UpdateCartItemAttributesRequest,
    UpdateCartItemRequest,
)
from ..core.session import CartSession
from .dependencies import get_cart_session

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def get_cart(session: CartSession = Depends(get_cart_session)):
    """Get the session cart with freshly computed totals"""
    cart = await session.engine.get_cart()
    return CartResponse(cart=cart)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    session: CartSession = Depends(get_cart_session),
):
    """Add an item to the cart"""
    cart = await session.engine.add_item(
        request.product_id,
        quantity=request.quantity,
        variation_id=request.variation_id,
        variation=request.variation,
        meta_data=request.meta_data,
    )
    return CartResponse(cart=cart, message=f"Added {request.quantity}x product {request.product_id} to cart")


@router.put("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    request: UpdateCartItemRequest,
    session: CartSession = Depends(get_cart_session),
):
    """Update item quantity in cart (zero or less removes the item)"""
    cart = await session.engine.update_quantity(item_id, request.quantity)
    return CartResponse(cart=cart, message="Cart updated")


@router.patch("/items/{item_id}", response_model=CartResponse)
async def update_cart_item_attributes(
    item_id: str,
    request: UpdateCartItemAttributesRequest,
    session: CartSession = Depends(get_cart_session),
):
    """Replace an item's variation attributes or metadata"""
    cart = await session.engine.update_item(
        item_id,
        variation=request.variation,
        meta_data=request.meta_data,
    )
    return CartResponse(cart=cart, message="Cart updated")


@router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_from_cart(
    item_id: str,
    session: CartSession = Depends(get_cart_session),
):
    """Remove an item from the cart"""
    cart = await session.engine.remove_item(item_id)
    return CartResponse(cart=cart, message="Item removed")


@router.post("/coupon", response_model=CartResponse)
async def apply_coupon(
    request: ApplyCouponRequest,
    session: CartSession = Depends(get_cart_session),
):
    """Apply a coupon code"""
    cart = await session.engine.apply_coupon(request.code)
    return CartResponse(cart=cart, message=f"Coupon {request.code} applied")


@router.delete("/coupon", response_model=CartResponse)
async def remove_coupon(session: CartSession = Depends(get_cart_session)):
    """Remove the applied coupon"""
    cart = await session.engine.remove_coupon()
    return CartResponse(cart=cart, message="Coupon removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(session: CartSession = Depends(get_cart_session)):
    """Clear all items from cart"""
    cart = await session.engine.clear()
    return CartResponse(cart=cart, message="Cart cleared")
