"""Order book used when WooCommerce is not configured"""

import itertools
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..models.checkout import OrderStatus
from .products import ProductDatabase

logger = logging.getLogger(__name__)


class OrderRejected(Exception):
    """Order could not be accepted"""
    pass


class OrderDatabase:
    """In-memory order storage accepting WooCommerce-shaped order payloads"""

    def __init__(self, product_db: Optional[ProductDatabase] = None, first_id: int = 1000):
        self.orders: dict[int, dict[str, Any]] = {}
        self.product_db = product_db
        self._ids = itertools.count(first_id)

    async def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an order from an order payload"""
        line_items = payload.get("line_items") or []
        if not line_items:
            raise OrderRejected("Order has no line items")

        if self.product_db is not None:
            # Check all lines before reserving any stock
            for line in line_items:
                product = await self.product_db.get_product(line["product_id"])
                if product is None:
                    raise OrderRejected(f"Product {line['product_id']} not found")
                if product.stock_quantity is not None and product.stock_quantity < line["quantity"]:
                    raise OrderRejected(f"Insufficient stock for {product.name}")
            for line in line_items:
                self.product_db.update_stock(line["product_id"], -line["quantity"])

        now = datetime.now(timezone.utc).isoformat()
        order = {
            **payload,
            "id": next(self._ids),
            "status": payload.get("status", OrderStatus.PENDING.value),
            "date_created": now,
            "date_modified": now,
        }
        self.orders[order["id"]] = order
        logger.info(f"Order {order['id']} created with {len(line_items)} line(s)")
        return order

    async def get_order(self, order_id: int) -> Optional[dict[str, Any]]:
        """Get an order by ID"""
        return self.orders.get(order_id)
