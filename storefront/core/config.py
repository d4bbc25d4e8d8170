"""Storefront Service Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "IntelliSMART Storefront"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    # WooCommerce Configuration
    woocommerce_url: Optional[str] = None
    woocommerce_consumer_key: Optional[str] = None
    woocommerce_consumer_secret: Optional[str] = None
    woocommerce_api_version: str = "wc/v3"
    woocommerce_timeout: float = 30.0

    # Cart persistence
    redis_url: Optional[str] = None
    cart_ttl_seconds: int = 30 * 24 * 60 * 60
    cart_key: str = "intellismart_cart"

    # Sessions
    session_max_idle_hours: float = 24
    session_cleanup_interval: float = 600

    # Pricing
    currency: str = "USD"
    flat_shipping_rate: float = 10.0
    tax_rate: float = 0.1

    @property
    def woocommerce_configured(self) -> bool:
        """Check if WooCommerce credentials are configured"""
        return all([
            self.woocommerce_url,
            self.woocommerce_consumer_key,
            self.woocommerce_consumer_secret,
        ])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
