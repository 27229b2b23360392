"""
Pydantic schemas for order request/response validation
"""
import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.schemas.common import CamelModel, PageMeta

PHONE_PATTERN = re.compile(r"^\d{8}$")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped", "completed", "cancelled", "fulfilled"
]


class StrippedModel(CamelModel):
    """Request schema that trims every string field"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class CustomerIn(StrippedModel):
    """Customer contact block"""
    name: str = Field(..., min_length=1, max_length=255, description="Customer name")
    phone: str = Field(..., description="Local phone number, exactly 8 digits")
    email: Optional[EmailStr] = Field(None, description="Customer email address")

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value):
        if value is None:
            raise ValueError("Phone is required")
        phone = str(value).strip()
        if not PHONE_PATTERN.match(phone):
            raise ValueError("Phone must be exactly 8 digits")
        return phone

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return value.lower() if value else value


class ShippingAddressIn(StrippedModel):
    """Shipping address block"""
    area: str = Field(..., min_length=1, max_length=255)
    block: str = Field(..., min_length=1, max_length=64)
    street: str = Field(..., min_length=1, max_length=255)
    avenue: str = Field("", max_length=255)
    house_no: str = Field(..., min_length=1, max_length=64)
    notes: str = Field("", max_length=2000)

    @field_validator("block", "house_no", mode="before")
    @classmethod
    def numbers_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("avenue", "notes", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value


class OrderItemIn(StrippedModel):
    """
    Requested cart line

    Only the product reference and quantity are read; any price the client
    sends is ignored.
    """
    product_id: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("product_id", "productId", "product"),
        description="Product ID",
    )
    qty: int = Field(1, description="Quantity, coerced to an integer >= 1")

    @field_validator("qty", mode="before")
    @classmethod
    def coerce_qty(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return max(1, int(value))
            except (OverflowError, ValueError):
                return 1
        match = LEADING_INT_PATTERN.match(str(value or ""))
        return max(1, int(match.group(1))) if match else 1


class OrderCreate(StrippedModel):
    """Schema for creating a new order"""
    customer: CustomerIn
    shipping_address: ShippingAddressIn
    items: List[OrderItemIn] = Field(..., min_length=1, description="Cart lines")


class OrderStatusUpdate(CamelModel):
    """Schema for updating order status"""
    status: OrderStatus = Field(..., description="New order status")


class OrderPaymentUpdate(StrippedModel):
    """Schema for updating payment details"""
    payment_method: Optional[str] = Field(None, max_length=100)
    payment_status: Optional[str] = Field(None, max_length=50)


class CustomerResponse(CamelModel):
    name: str
    phone: str
    email: Optional[str] = None


class ShippingAddressResponse(CamelModel):
    area: str
    block: str
    street: str
    avenue: str = ""
    house_no: str
    notes: str = ""


class OrderItemResponse(CamelModel):
    product_id: int
    title: str
    price_in_fils: int
    currency: str
    qty: int
    image: Optional[str] = None


class OrderResponse(CamelModel):
    """Schema for order response"""
    id: int
    invoice_no: str
    user_id: Optional[str] = None
    customer: CustomerResponse
    shipping_address: ShippingAddressResponse
    items: List[OrderItemResponse]
    subtotal_in_fils: int
    shipping_in_fils: int
    total_in_fils: int
    status: str
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderCreatedResponse(CamelModel):
    """Schema returned to the client right after checkout"""
    id: int
    invoice_no: str
    subtotal_in_fils: int
    shipping_in_fils: int
    total_in_fils: int
    status: str
    created_at: datetime


class OrderListResponse(PageMeta):
    """Schema for a page of orders"""
    items: List[OrderResponse]
