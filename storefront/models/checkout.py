"""Checkout models for the storefront"""

from pydantic import BaseModel, EmailStr, Field
from typing import Any, Optional
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"


class CustomerInfo(BaseModel):
    """Billing details from the checkout form, with optional shipping overrides"""
    customer_id: int = 0
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone: str = ""
    address_1: str = Field(min_length=1)
    address_2: str = ""
    city: str = Field(min_length=1)
    state: str = ""
    postcode: str = Field(min_length=1)
    country: str = Field(min_length=2)

    # Shipping address, when it differs from billing
    shipping_first_name: Optional[str] = None
    shipping_last_name: Optional[str] = None
    shipping_address_1: Optional[str] = None
    shipping_address_2: Optional[str] = None
    shipping_city: Optional[str] = None
    shipping_state: Optional[str] = None
    shipping_postcode: Optional[str] = None
    shipping_country: Optional[str] = None

    def billing_address(self) -> dict[str, str]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": str(self.email),
            "phone": self.phone,
            "address_1": self.address_1,
            "address_2": self.address_2,
            "city": self.city,
            "state": self.state,
            "postcode": self.postcode,
            "country": self.country,
        }

    def shipping_address(self) -> dict[str, str]:
        """Shipping block, each field falling back to its billing value"""
        return {
            "first_name": self.shipping_first_name or self.first_name,
            "last_name": self.shipping_last_name or self.last_name,
            "address_1": self.shipping_address_1 or self.address_1,
            "address_2": self.shipping_address_2 or self.address_2,
            "city": self.shipping_city or self.city,
            "state": self.shipping_state or self.state,
            "postcode": self.shipping_postcode or self.postcode,
            "country": self.shipping_country or self.country,
        }


class CheckoutRequest(BaseModel):
    """Request to checkout the session cart"""
    customer: CustomerInfo


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    order: Optional[dict[str, Any]] = None
    error_message: Optional[str] = None
