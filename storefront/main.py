"""
Storefront Cart Service

Cart, coupon and checkout API consumed by the IntelliSMART storefront pages.
Prices come from WooCommerce when it is configured, otherwise from the demo
catalog.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from .core.config import Settings, settings
from .core.session import CartSessionManager
from .database import MemoryCartStore, OrderDatabase, ProductDatabase, RedisCartStore
from .routes import products_router, cart_router, checkout_router
from .routes.dependencies import SESSION_HEADER
from .services.woocommerce_client import WooCommerceClient, WooCommerceError

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_session_manager(config: Settings) -> CartSessionManager:
    """Wire the cart engine collaborators from configuration"""
    if config.woocommerce_configured:
        woo = WooCommerceClient(
            base_url=config.woocommerce_url,
            consumer_key=config.woocommerce_consumer_key,
            consumer_secret=config.woocommerce_consumer_secret,
            version=config.woocommerce_api_version,
            timeout=config.woocommerce_timeout,
        )
        catalog, orders = woo, woo
    else:
        logger.warning("WooCommerce not configured - using demo catalog and in-memory orders")
        catalog = ProductDatabase()
        orders = OrderDatabase(product_db=catalog)

    if config.redis_url:
        store = RedisCartStore(url=config.redis_url, ttl_seconds=config.cart_ttl_seconds)
    else:
        logger.warning("Redis not configured - carts are kept in memory")
        store = MemoryCartStore()

    return CartSessionManager(
        store=store,
        catalog=catalog,
        orders=orders,
        cart_key=config.cart_key,
        shipping_rate=config.flat_shipping_rate,
        tax_rate=config.tax_rate,
        currency=config.currency,
        max_idle_hours=config.session_max_idle_hours,
        cleanup_interval=config.session_cleanup_interval,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Storefront cart service starting up...")
    if getattr(app.state, "session_manager", None) is None:
        app.state.session_manager = build_session_manager(settings)
    manager: CartSessionManager = app.state.session_manager
    logger.info(f"Catalog: {type(manager.catalog).__name__}, cart store: {type(manager.store).__name__}")
    await manager.start()

    yield

    logger.info("Storefront cart service shutting down...")
    await manager.stop()
    # catalog and orders are the same client when WooCommerce is configured
    closed = set()
    for resource in (manager.catalog, manager.orders, manager.store):
        if isinstance(resource, (WooCommerceClient, RedisCartStore)) and id(resource) not in closed:
            closed.add(id(resource))
            await resource.close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Cart pricing and checkout API for the IntelliSMART storefront",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SESSION_HEADER],
)

# Include API routers
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(checkout_router)


@app.exception_handler(WooCommerceError)
async def woocommerce_error_handler(request: Request, exc: WooCommerceError):
    logger.error(f"Upstream WooCommerce error on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "Catalog service unavailable"})


@app.get("/")
async def home():
    return {
        "message": "IntelliSMART Storefront Cart API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "cart": "/api/cart",
            "checkout": "/api/checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront-cart",
        "woocommerce_configured": settings.woocommerce_configured,
        "redis_configured": bool(settings.redis_url),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
