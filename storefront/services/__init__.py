# Services

from .cart_engine import CartEngine, CheckoutError, EmptyCartError, build_order_payload
from .pricing import DiscountPolicy, Totals, compute_totals, no_discount
from .woocommerce_client import WooCommerceClient, WooCommerceError

__all__ = [
    "CartEngine",
    "CheckoutError",
    "EmptyCartError",
    "build_order_payload",
    "DiscountPolicy",
    "Totals",
    "compute_totals",
    "no_discount",
    "WooCommerceClient",
    "WooCommerceError",
]
