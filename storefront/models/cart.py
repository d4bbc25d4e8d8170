"""Cart models for the storefront"""

from pydantic import BaseModel, Field, computed_field, field_validator
from typing import Any, Optional


class MetaData(BaseModel):
    """Free-form key/value pair attached to a cart line"""
    key: str
    value: Any = None


class CartItem(BaseModel):
    """Item in a shopping cart"""
    id: str
    product_id: int
    quantity: int = Field(ge=1)
    variation_id: Optional[int] = None
    variation: Optional[dict[str, Any]] = None
    meta_data: list[MetaData] = Field(default_factory=list)

    @field_validator("variation_id")
    @classmethod
    def _zero_means_no_variation(cls, value: Optional[int]) -> Optional[int]:
        return value or None

    def matches(self, product_id: int, variation_id: Optional[int]) -> bool:
        """True if this line holds the given product/variation pair"""
        return self.product_id == product_id and self.variation_id == (variation_id or None)


class Cart(BaseModel):
    """Shopping cart.

    The monetary fields are derived from ``items`` and ``coupon_code`` by the
    cart engine and are never set directly by callers.
    """
    items: list[CartItem] = Field(default_factory=list)
    coupon_code: Optional[str] = None
    subtotal: float = 0.0
    shipping: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    currency: str = "USD"

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, item_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.id == item_id), None)


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: int
    quantity: int = Field(default=1, gt=0)
    variation_id: Optional[int] = None
    variation: Optional[dict[str, Any]] = None
    meta_data: list[MetaData] = Field(default_factory=list)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity (zero or less removes the line)"""
    quantity: int


class UpdateCartItemAttributesRequest(BaseModel):
    """Request to replace the display attributes of a cart line"""
    variation: Optional[dict[str, Any]] = None
    meta_data: Optional[list[MetaData]] = None


class ApplyCouponRequest(BaseModel):
    """Request to apply a coupon code"""
    code: str = Field(min_length=1)


class CartResponse(BaseModel):
    """Cart API response"""
    cart: Cart
    message: Optional[str] = None
