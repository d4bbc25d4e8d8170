"""Session management: one cart engine per storefront session"""

import asyncio
import uuid
import logging
from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass

from ..database.carts import CartStore
from ..services.cart_engine import CartEngine, Catalog, OrderService
from ..services.pricing import DiscountPolicy, no_discount

logger = logging.getLogger(__name__)


@dataclass
class CartSession:
    """Storefront session owning a cart engine"""
    session_id: str
    engine: CartEngine
    created_at: datetime
    last_seen_at: datetime

    def touch(self) -> None:
        self.last_seen_at = datetime.now(timezone.utc)


class CartSessionManager:
    """Creates and caches the cart engine of each session"""

    def __init__(
        self,
        store: CartStore,
        catalog: Catalog,
        orders: OrderService,
        cart_key: str = "intellismart_cart",
        discount_policy: DiscountPolicy = no_discount,
        shipping_rate: float = 10.0,
        tax_rate: float = 0.1,
        currency: str = "USD",
        max_idle_hours: float = 24,
        cleanup_interval: float = 600,
    ):
        self.store = store
        self.catalog = catalog
        self.orders = orders
        self.cart_key = cart_key
        self.discount_policy = discount_policy
        self.shipping_rate = shipping_rate
        self.tax_rate = tax_rate
        self.currency = currency
        self.max_idle_hours = max_idle_hours
        self.cleanup_interval = cleanup_interval
        self.sessions: dict[str, CartSession] = {}
        self._create_lock = asyncio.Lock()
        self._cleanup_task: Optional[asyncio.Task] = None

    @staticmethod
    def new_session_id() -> str:
        return str(uuid.uuid4())

    def storage_key(self, session_id: str) -> str:
        return f"{self.cart_key}:{session_id}"

    async def get_session(self, session_id: Optional[str] = None) -> CartSession:
        """Get existing session or create one, restoring its persisted cart"""
        if session_id and session_id in self.sessions:
            session = self.sessions[session_id]
            session.touch()
            return session

        async with self._create_lock:
            # another request may have opened it while we waited
            if session_id and session_id in self.sessions:
                session = self.sessions[session_id]
                session.touch()
                return session

            session_id = session_id or self.new_session_id()
            engine = await CartEngine.create(
                self.store,
                self.catalog,
                self.orders,
                key=self.storage_key(session_id),
                discount_policy=self.discount_policy,
                shipping_rate=self.shipping_rate,
                tax_rate=self.tax_rate,
                currency=self.currency,
            )
            now = datetime.now(timezone.utc)
            session = CartSession(
                session_id=session_id,
                engine=engine,
                created_at=now,
                last_seen_at=now,
            )
            self.sessions[session_id] = session
            logger.debug(f"Cart session {session_id} opened")
            return session

    def drop_session(self, session_id: str) -> bool:
        """Forget a session's engine; its persisted cart is kept"""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_idle_sessions(self, max_idle_hours: Optional[float] = None) -> int:
        """Forget engines not used for max_idle_hours; persisted carts are kept"""
        if max_idle_hours is None:
            max_idle_hours = self.max_idle_hours
        now = datetime.now(timezone.utc)
        idle = [
            sid for sid, session in self.sessions.items()
            if (now - session.last_seen_at).total_seconds() > max_idle_hours * 3600
        ]
        for sid in idle:
            del self.sessions[sid]
        if idle:
            logger.info(f"Dropped {len(idle)} idle cart session(s)")
        return len(idle)

    # ==================== Background cleanup ====================

    async def start(self) -> None:
        """Start the idle-session cleanup loop"""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info(f"Session cleanup every {self.cleanup_interval}s (idle limit {self.max_idle_hours}h)")

    async def stop(self) -> None:
        """Cancel the cleanup loop"""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

    @property
    def cleanup_running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            try:
                self.cleanup_idle_sessions()
            except Exception as e:
                logger.error(f"Session cleanup error: {e}")
