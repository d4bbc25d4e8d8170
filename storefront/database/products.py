"""Demo product catalog used when WooCommerce is not configured"""

from typing import Optional
from ..models.product import Product, ProductCategory, StockStatus

SMART_HOME = ProductCategory(id=15, name="Smart Home", slug="smart-home")
AUDIO = ProductCategory(id=16, name="Audio", slug="audio")
WEARABLES = ProductCategory(id=17, name="Wearables", slug="wearables")
ACCESSORIES = ProductCategory(id=18, name="Accessories", slug="accessories")

# Demo catalog
PRODUCTS: dict[int, Product] = {
    101: Product(
        id=101,
        name="IntelliSMART Hub",
        slug="intellismart-hub",
        sku="IS-HUB-01",
        description="Zigbee, Z-Wave and Matter bridge for the whole home.",
        price=129.99,
        regular_price=129.99,
        categories=[SMART_HOME],
        stock_quantity=40,
    ),
    102: Product(
        id=102,
        name="Smart Plug (2-pack)",
        slug="smart-plug-2-pack",
        sku="IS-PLUG-2PK",
        description="Energy monitoring plugs with scheduling.",
        price=24.50,
        regular_price=29.00,
        sale_price=24.50,
        on_sale=True,
        categories=[SMART_HOME],
        stock_quantity=250,
    ),
    103: Product(
        id=103,
        name="Motion Sensor",
        slug="motion-sensor",
        sku="IS-MOTION-01",
        description="Battery-powered PIR sensor with light level reporting.",
        price=19.99,
        regular_price=19.99,
        categories=[SMART_HOME],
        stock_quantity=120,
    ),
    104: Product(
        id=104,
        name="Studio Wireless Earbuds",
        slug="studio-wireless-earbuds",
        sku="IS-BUDS-BLK",
        description="Active noise cancellation and 24-hour case battery.",
        price=89.00,
        regular_price=89.00,
        categories=[AUDIO],
        stock_quantity=60,
        variations=[1041, 1042],
    ),
    105: Product(
        id=105,
        name="Bookshelf Speaker Pair",
        slug="bookshelf-speaker-pair",
        sku="IS-SPK-PAIR",
        description="Powered speakers with Wi-Fi streaming.",
        price=249.00,
        regular_price=249.00,
        categories=[AUDIO],
        stock_quantity=15,
    ),
    106: Product(
        id=106,
        name="Fitness Band",
        slug="fitness-band",
        sku="IS-BAND-01",
        description="Heart rate, sleep and SpO2 tracking.",
        price=59.95,
        regular_price=59.95,
        categories=[WEARABLES],
        stock_quantity=0,
        stock_status=StockStatus.OUT_OF_STOCK,
    ),
    107: Product(
        id=107,
        name="USB-C Charging Cable",
        slug="usb-c-charging-cable",
        sku="IS-CBL-USBC",
        description="2 m braided cable, 100 W.",
        price=12.00,
        regular_price=12.00,
        categories=[ACCESSORIES],
        stock_quantity=500,
    ),
}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self, products: Optional[dict[int, Product]] = None):
        source = PRODUCTS if products is None else products
        self.products = {pid: p.model_copy(deep=True) for pid, p in source.items()}

    async def get_product(self, product_id: int) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    async def get_products(
        self,
        page: int = 1,
        per_page: int = 12,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Product]:
        """List in-stock products, filtered and paginated like the WooCommerce API"""
        results = [p for p in self.products.values() if p.in_stock]

        if search:
            search_lower = search.lower()
            results = [
                p for p in results
                if search_lower in p.name.lower()
                or search_lower in (p.description or "").lower()
            ]

        if category:
            results = [
                p for p in results
                if any(c.slug == category or str(c.id) == category for c in p.categories)
            ]

        offset = (page - 1) * per_page
        return results[offset : offset + per_page]

    def update_stock(self, product_id: int, quantity_change: int) -> bool:
        """
        Update product stock.

        Args:
            product_id: Product to update
            quantity_change: Positive to add, negative to remove

        Returns:
            True if successful
        """
        product = self.products.get(product_id)
        if not product:
            return False

        new_quantity = (product.stock_quantity or 0) + quantity_change
        if new_quantity < 0:
            return False

        product.stock_quantity = new_quantity
        product.stock_status = StockStatus.IN_STOCK if new_quantity > 0 else StockStatus.OUT_OF_STOCK
        return True

    def remove_product(self, product_id: int) -> bool:
        """Delete a product from the catalog"""
        return self.products.pop(product_id, None) is not None
