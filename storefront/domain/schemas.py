# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List


class Caller(BaseModel):
    """Identity resolved from a bearer token."""

    user_id: int
    is_admin: bool = False


class Credentials(BaseModel):
    """Schema for signup and login."""

    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)


class TokenOut(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    is_admin: bool = False


class ProductCreate(BaseModel):
    """Schema for creating a catalog product (admin)."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price_minor_units: int = Field(..., gt=0, description="Unit price in cents")
    inventory: int = Field(0, ge=0)
    active: bool = True


class ProductOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    price_minor_units: int
    price: str
    inventory: int
    active: bool


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class CartItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    unit_price_minor_units: int


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    items: List[CartItemOut]
    total_minor_units: int
    total: str

    model_config = ConfigDict(from_attributes=True)


class CheckoutOut(BaseModel):
    message: str
    total_paid_minor_units: int
    payment_intent_id: str
    client_secret: str



def format_minor_units(amount: int) -> str:
    return f"{amount / 100:.2f}"
