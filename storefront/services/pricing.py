"""
Cart pricing

Turns a raw subtotal and the applied coupon into the derived cart totals.
"""

from dataclasses import dataclass
from typing import Callable, Optional

# (subtotal, coupon_code) -> discount amount
DiscountPolicy = Callable[[float, str], float]


def no_discount(subtotal: float, coupon_code: str) -> float:
    """Accept any coupon without reducing the price"""
    return 0.0


def round_money(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class Totals:
    """Derived cart totals, each rounded to cents on its own"""
    subtotal: float
    shipping: float
    tax: float
    discount: float
    total: float


def compute_totals(
    subtotal: float,
    coupon_code: Optional[str],
    discount_policy: DiscountPolicy = no_discount,
    shipping_rate: float = 10.0,
    tax_rate: float = 0.1,
) -> Totals:
    """
    Compute shipping, tax, discount and total for a cart subtotal.

    Shipping is a flat rate for any non-empty subtotal, tax is a single
    global rate on the subtotal. The total is not clamped, so a discount
    larger than the rest of the cart gives a negative total.

    Rounding happens per field from the unrounded values, so the rounded
    fields may not add up to the rounded total.
    """
    discount = discount_policy(subtotal, coupon_code) if coupon_code else 0.0
    shipping = shipping_rate if subtotal > 0 else 0.0
    tax = subtotal * tax_rate
    total = subtotal + shipping + tax - discount

    return Totals(
        subtotal=round_money(subtotal),
        shipping=round_money(shipping),
        tax=round_money(tax),
        discount=round_money(discount),
        total=round_money(total),
    )
