"""
Cart Engine

Owns one session's shopping cart: line items, applied coupon and the derived
totals. Totals are recomputed from fresh catalog prices on every mutation and
every read, and the whole cart is written back to the cart store each time.
"""

import asyncio
import logging
import time
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from ..database.carts import CartStore
from ..models.cart import Cart, CartItem, MetaData
from ..models.checkout import CustomerInfo
from ..models.product import Product
from .pricing import DiscountPolicy, compute_totals, no_discount

logger = logging.getLogger(__name__)


class Catalog(Protocol):
    async def get_product(self, product_id: int) -> Optional[Product]:
        ...


class OrderService(Protocol):
    async def create_order(self, payload: dict) -> dict:
        ...


class CheckoutError(Exception):
    """Order could not be placed; the cart is left as it was"""
    pass


class EmptyCartError(CheckoutError):
    """Checkout attempted on a cart without items"""
    pass


def build_order_payload(cart: Cart, customer: CustomerInfo) -> dict[str, Any]:
    """Build a WooCommerce order document from a priced cart"""
    return {
        "payment_method": "bacs",
        "payment_method_title": "Direct Bank Transfer",
        "status": "pending",
        "customer_id": customer.customer_id,
        "currency": cart.currency,
        "billing": customer.billing_address(),
        "shipping": customer.shipping_address(),
        "line_items": [
            {
                "product_id": item.product_id,
                "variation_id": item.variation_id or 0,
                "quantity": item.quantity,
                "meta_data": [m.model_dump() for m in item.meta_data],
            }
            for item in cart.items
        ],
        "shipping_lines": [
            {
                "method_id": "flat_rate",
                "method_title": "Flat Rate",
                "total": f"{cart.shipping:.2f}",
            }
        ],
        "fee_lines": [
            {"name": "Discount", "total": f"-{cart.discount:.2f}"}
        ] if cart.discount > 0 else [],
        "coupon_lines": [
            {"code": cart.coupon_code, "discount": f"{cart.discount:.2f}"}
        ] if cart.coupon_code else [],
    }


class CartEngine:
    """
    Shopping cart for a single session.

    Build it with ``await CartEngine.create(...)`` so the persisted cart is
    restored before first use. All reads go through ``get_cart()``.
    """

    def __init__(
        self,
        store: CartStore,
        catalog: Catalog,
        orders: OrderService,
        key: str = "intellismart_cart",
        discount_policy: DiscountPolicy = no_discount,
        shipping_rate: float = 10.0,
        tax_rate: float = 0.1,
        currency: str = "USD",
    ):
        self.store = store
        self.catalog = catalog
        self.orders = orders
        self.key = key
        self.discount_policy = discount_policy
        self.shipping_rate = shipping_rate
        self.tax_rate = tax_rate
        self.currency = currency
        self._cart = self._empty_cart()
        self._lock = asyncio.Lock()

    @classmethod
    async def create(cls, store: CartStore, catalog: Catalog, orders: OrderService, **kwargs) -> "CartEngine":
        """Create an engine and restore its persisted cart"""
        engine = cls(store, catalog, orders, **kwargs)
        await engine.restore()
        return engine

    def _empty_cart(self) -> Cart:
        return Cart(currency=self.currency)

    # ==================== Persistence ====================

    async def restore(self) -> None:
        """Load the persisted cart, starting empty if it is missing or unreadable"""
        async with self._lock:
            self._cart = await self._load()

    async def _load(self) -> Cart:
        try:
            raw = await self.store.load(self.key)
        except Exception as e:
            logger.error(f"Error loading cart {self.key}: {e}")
            return self._empty_cart()

        if not raw:
            return self._empty_cart()

        try:
            cart = Cart.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cart {self.key}: {e.error_count()} error(s)")
            return self._empty_cart()

        logger.debug(f"Restored cart {self.key} with {len(cart.items)} item(s)")
        return cart

    async def _save(self) -> None:
        try:
            await self.store.save(self.key, self._cart.model_dump_json())
        except Exception as e:
            # The in-memory cart stays authoritative for this session
            logger.error(f"Error saving cart {self.key}: {e}")

    # ==================== Pricing ====================

    async def _unit_price(self, item: CartItem) -> float:
        try:
            product = await self.catalog.get_product(item.product_id)
        except Exception as e:
            logger.warning(f"Error calculating price for product {item.product_id}: {e}")
            return 0.0

        if product is None:
            logger.warning(f"Product {item.product_id} not found; pricing line {item.id} at zero")
            return 0.0
        return product.price

    async def _recalculate(self) -> Cart:
        """Reprice every line, refresh derived totals, and persist"""
        cart = self._cart
        subtotal = 0.0
        for item in cart.items:
            subtotal += await self._unit_price(item) * item.quantity

        totals = compute_totals(
            subtotal,
            cart.coupon_code,
            discount_policy=self.discount_policy,
            shipping_rate=self.shipping_rate,
            tax_rate=self.tax_rate,
        )
        cart.subtotal = totals.subtotal
        cart.shipping = totals.shipping
        cart.tax = totals.tax
        cart.discount = totals.discount
        cart.total = totals.total

        await self._save()
        return self._snapshot()

    def _snapshot(self) -> Cart:
        return self._cart.model_copy(deep=True)

    # ==================== Cart operations ====================
    # Every public operation holds the engine lock, so concurrent requests
    # on one session run one after another.

    async def get_cart(self) -> Cart:
        """Recompute totals and return a copy of the cart"""
        async with self._lock:
            return await self._recalculate()

    async def add_item(
        self,
        product_id: int,
        quantity: int = 1,
        variation_id: Optional[int] = None,
        variation: Optional[dict[str, Any]] = None,
        meta_data: Optional[list[MetaData]] = None,
    ) -> Cart:
        """Add units of a product, merging into an existing line for the same variation"""
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        async with self._lock:
            existing = next(
                (item for item in self._cart.items if item.matches(product_id, variation_id)),
                None,
            )

            if existing:
                existing.quantity += quantity
            else:
                self._cart.items.append(
                    CartItem(
                        id=f"{product_id}-{variation_id or 0}-{int(time.time() * 1000)}",
                        product_id=product_id,
                        quantity=quantity,
                        variation_id=variation_id,
                        variation=variation,
                        meta_data=meta_data or [],
                    )
                )

            return await self._recalculate()

    async def update_quantity(self, item_id: str, quantity: int) -> Cart:
        """Set a line's quantity; zero or less removes the line"""
        async with self._lock:
            if quantity <= 0:
                self._drop_line(item_id)
            else:
                item = self._cart.find_item(item_id)
                if item is not None:
                    item.quantity = quantity
            return await self._recalculate()

    async def update_item(
        self,
        item_id: str,
        variation: Optional[dict[str, Any]] = None,
        meta_data: Optional[list[MetaData]] = None,
    ) -> Cart:
        """Replace the display attributes of a line"""
        async with self._lock:
            item = self._cart.find_item(item_id)
            if item is not None:
                if variation is not None:
                    item.variation = variation
                if meta_data is not None:
                    item.meta_data = list(meta_data)
            return await self._recalculate()

    async def remove_item(self, item_id: str) -> Cart:
        """Remove a line if present"""
        async with self._lock:
            self._drop_line(item_id)
            return await self._recalculate()

    def _drop_line(self, item_id: str) -> None:
        self._cart.items = [item for item in self._cart.items if item.id != item_id]

    async def apply_coupon(self, code: str) -> Cart:
        """Attach a coupon code and reprice"""
        # TODO: validate the code against WooCommerce /coupons before accepting it
        async with self._lock:
            self._cart.coupon_code = code
            return await self._recalculate()

    async def remove_coupon(self) -> Cart:
        """Detach the coupon and reprice"""
        async with self._lock:
            self._cart.coupon_code = None
            self._cart.discount = 0.0
            return await self._recalculate()

    async def clear(self) -> Cart:
        """Empty the cart and persist it immediately"""
        async with self._lock:
            return await self._clear()

    async def _clear(self) -> Cart:
        self._cart = self._empty_cart()
        await self._save()
        return self._snapshot()

    # ==================== Checkout ====================

    async def checkout(self, customer: CustomerInfo) -> dict:
        """
        Place an order for the current cart.

        The cart is cleared only once the order service returns an order id.
        Any failure raises CheckoutError and leaves the cart untouched. Other
        operations on this cart wait until the order has been placed.
        """
        async with self._lock:
            cart = await self._recalculate()
            if cart.is_empty:
                raise EmptyCartError("Cart is empty")

            payload = build_order_payload(cart, customer)

            try:
                order = await self.orders.create_order(payload)
            except Exception as e:
                logger.error(f"Error creating order for cart {self.key}: {e}")
                raise CheckoutError(f"Failed to create order: {e}") from e

            if order.get("id"):
                logger.info(f"Order {order['id']} placed for cart {self.key}: ${cart.total}")
                await self._clear()
            else:
                logger.warning(f"Order service returned no order id for cart {self.key}; cart kept")

            return order
