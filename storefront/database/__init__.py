# Storage modules

from .products import ProductDatabase
from .orders import OrderDatabase, OrderRejected
from .carts import CartStore, MemoryCartStore, RedisCartStore

__all__ = [
    "ProductDatabase",
    "OrderDatabase",
    "OrderRejected",
    "CartStore",
    "MemoryCartStore",
    "RedisCartStore",
]
