"""Product models for the storefront"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional
from enum import Enum


class StockStatus(str, Enum):
    IN_STOCK = "instock"
    OUT_OF_STOCK = "outofstock"
    ON_BACKORDER = "onbackorder"


class ProductImage(BaseModel):
    id: Optional[int] = None
    src: str
    alt: Optional[str] = None


class ProductCategory(BaseModel):
    id: int
    name: str
    slug: Optional[str] = None


class Product(BaseModel):
    """Product in the catalog (WooCommerce field names)"""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int
    name: str
    slug: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float = 0.0
    regular_price: Optional[float] = None
    sale_price: Optional[float] = None
    on_sale: bool = False
    currency: str = "USD"
    categories: list[ProductCategory] = Field(default_factory=list)
    images: list[ProductImage] = Field(default_factory=list)
    stock_status: StockStatus = StockStatus.IN_STOCK
    stock_quantity: Optional[int] = None
    variations: list[int] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Any:
        # WooCommerce sends prices as strings and uses "" for "no price"
        if value is None or value == "":
            return 0.0
        return value

    @field_validator("regular_price", "sale_price", mode="before")
    @classmethod
    def _parse_optional_price(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @property
    def in_stock(self) -> bool:
        return self.stock_status != StockStatus.OUT_OF_STOCK
