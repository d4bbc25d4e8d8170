"""
WooCommerce API Client

HTTP client for the WooCommerce REST API (products and orders).
Serves as the catalog and order collaborator of the cart engine.
"""

import logging
from typing import Optional, Any

import httpx

from ..models.product import Product

logger = logging.getLogger(__name__)


class WooCommerceError(Exception):
    """Non-success response from the WooCommerce API"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"WooCommerce request failed: {status_code} - {message}")
        self.status_code = status_code
        self.message = message


class WooCommerceClient:
    """
    Client for the WooCommerce REST API.

    Authenticates with the store's consumer key/secret over HTTP basic auth.
    """

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        version: str = "wc/v3",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize WooCommerce client.

        Args:
            base_url: Store URL (without the /wp-json suffix)
            consumer_key: REST API consumer key
            consumer_secret: REST API consumer secret
            version: REST API namespace
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = f"{base_url.rstrip('/')}/wp-json/{version}"
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(consumer_key, consumer_secret),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"WooCommerce client initialized for {self.base_url}")

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON response"""
        response = await self._http_client.request(
            method=method,
            url=path,
            params=params,
            json=body,
        )

        if response.status_code >= 400:
            logger.error(f"Request failed: {method} {path} {response.status_code} - {response.text}")
            raise WooCommerceError(response.status_code, response.text)

        return response.json()

    # ==================== Product APIs ====================

    async def get_product(self, product_id: int) -> Optional[Product]:
        """Get product details, or None if the product does not exist"""
        try:
            data = await self._request("GET", f"/products/{product_id}")
        except WooCommerceError as e:
            if e.status_code == 404:
                return None
            raise
        return Product.model_validate(data)

    async def get_products(
        self,
        page: int = 1,
        per_page: int = 12,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Product]:
        """List published products"""
        params: dict[str, Any] = {
            "page": page,
            "per_page": per_page,
            "status": "publish",
        }
        if category:
            params["category"] = category
        if search:
            params["search"] = search

        data = await self._request("GET", "/products", params=params)
        return [Product.model_validate(item) for item in data]

    # ==================== Order APIs ====================

    async def create_order(self, payload: dict) -> dict:
        """Create an order"""
        order = await self._request("POST", "/orders", body=payload)
        logger.info(f"WooCommerce order {order.get('id')} created")
        return order

    async def get_order(self, order_id: int) -> Optional[dict]:
        """Get order details, or None if the order does not exist"""
        try:
            return await self._request("GET", f"/orders/{order_id}")
        except WooCommerceError as e:
            if e.status_code == 404:
                return None
            raise
