# Storefront Models

from .product import Product, ProductCategory, ProductImage, StockStatus
from .cart import (
    Cart,
    CartItem,
    MetaData,
    AddToCartRequest,
    UpdateCartItemRequest,
    UpdateCartItemAttributesRequest,
    ApplyCouponRequest,
    CartResponse,
)
from .checkout import (
    CustomerInfo,
    CheckoutRequest,
    CheckoutResponse,
    OrderStatus,
)

__all__ = [
    "Product",
    "ProductCategory",
    "ProductImage",
    "StockStatus",
    "Cart",
    "CartItem",
    "MetaData",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "UpdateCartItemAttributesRequest",
    "ApplyCouponRequest",
    "CartResponse",
    "CustomerInfo",
    "CheckoutRequest",
    "CheckoutResponse",
    "OrderStatus",
]
