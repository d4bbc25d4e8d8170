# Core modules

from .config import settings
from .session import CartSessionManager, CartSession

__all__ = ["settings", "CartSessionManager", "CartSession"]
