from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_USERNAME = "Anonymous"

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Stored records

class Product(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    sale_price: Optional[float] = Field(None, gt=0)
    image_url: str = ""
    category: str
    subcategory: Optional[str] = None
    is_new_arrival: bool = False
    is_best_seller: bool = False
    is_on_sale: bool = False
    in_stock: bool = True
    rating: float = Field(0.0, ge=0.0, le=5.0)
    review_count: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _sale_below_price(self) -> "Product":
        if self.sale_price is not None and self.sale_price >= self.price:
            raise ValueError("sale_price must be lower than price")
        return self

    @property
    def effective_price(self) -> float:
        return self.sale_price if self.sale_price is not None else self.price


class CartLineItem(CamelModel):
    id: int
    session_id: str
    product_id: int
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class WishlistEntry(CamelModel):
    id: int
    session_id: str
    product_id: int
    added_at: datetime


class Review(CamelModel):
    id: int
    session_id: str
    product_id: int
    rating: int = Field(..., ge=1, le=5)
    title: str
    comment: str
    username: str = DEFAULT_USERNAME
    created_at: datetime


# Joined views

class CartLine(CartLineItem):
    product: Product


class CartView(CamelModel):
    session_id: str
    items: List[CartLine] = Field(default_factory=list)
    item_count: int = 0
    subtotal: float = 0.0


class CartAddResponse(CartView):
    added_item: CartLineItem


class WishlistLine(WishlistEntry):
    product: Product


class WishlistView(CamelModel):
    session_id: str
    items: List[WishlistLine] = Field(default_factory=list)


class WishlistAddResponse(WishlistView):
    added: WishlistEntry


class WishlistCheck(CamelModel):
    session_id: str
    product_id: int
    in_wishlist: bool


class ReviewAddResponse(CamelModel):
    review: Review
    reviews: List[Review]


# Request bodies

def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CartAddRequest(CamelModel):
    product_id: int
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None
    color: Optional[str] = None

    @field_validator("size", "color", mode="before")
    @classmethod
    def _normalize_variant(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CartUpdateRequest(CamelModel):
    quantity: int


class WishlistAddRequest(CamelModel):
    product_id: int


class ReviewCreateRequest(CamelModel):
    product_id: int
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1)
    comment: str = Field(..., min_length=1)
    username: str = DEFAULT_USERNAME

    @field_validator("title", "comment")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("username", mode="before")
    @classmethod
    def _default_username(cls, value: Any) -> Any:
        return _blank_to_none(value) or DEFAULT_USERNAME


class CheckoutRequest(CamelModel):
    full_name: str = Field(..., min_length=1)
    email: str
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email address")
        return value


class OrderDetails(CamelModel):
    customer: CheckoutRequest
    items: List[CartLine]
    subtotal: float
    shipping: float
    total: float


class OrderConfirmation(CamelModel):
    success: bool = True
    order_id: str
    order_details: OrderDetails
