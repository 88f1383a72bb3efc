"""Request and response models for the HTTP API."""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItemIn(BaseModel):
    """One cart entry as the storefront client sends it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    price: Decimal | None = None
    min_quantity: int | None = Field(None, alias="minQuantity")
    quantity: int

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        return str(value) if isinstance(value, int) else value


class CheckoutIn(BaseModel):
    """Checkout form; presence of each field is validated by the use case."""

    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal | None = None
    email: str = ""
    cart_items: List[CartItemIn] = Field(default_factory=list, alias="cartItems")
    customer_name: str = Field("", alias="customerName")
    shipping_address: str = Field("", alias="shippingAddress")
    contact_number: str = Field("", alias="contactNumber")


class InitializeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authorization_url: str
    access_code: str
    reference: str
    order_id: int = Field(..., serialization_alias="orderId")
    public_key: str = Field("", serialization_alias="publicKey")


class VerifyOut(BaseModel):
    success: bool
    order_id: int | None = Field(None, serialization_alias="orderId")
    message: str
    reference: str | None = None
    status: str | None = None


class OrderItemOut(BaseModel):
    product_id: str
    quantity: int
    min_quantity: int
    unit_price: str
    line_total: str


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    status: str
    shipping_address: str
    items: List[OrderItemOut]
    subtotal: str
    tax: str
    shipping: str
    total: str
    created_at: str
    updated_at: str
