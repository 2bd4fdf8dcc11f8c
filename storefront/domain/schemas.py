# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.utils import ids
from storefront.utils.ids import EntityPrefix


class CamelModel(BaseModel):
    """Snake case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _check_id(value: str | None, prefix: EntityPrefix, field: str) -> str | None:
    if value is not None and not ids.validate_prefix(value, prefix):
        raise ValueError(f"{field} must be a valid {prefix.value}_ identifier")
    return value


# ---------- users ----------

class UserCreate(CamelModel):
    """Schema for registering a user."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserRead(CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime | None = None


# ---------- categories ----------

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryOut(CamelModel):
    id: str
    name: str


# ---------- products ----------

class ProductCreate(CamelModel):
    """Schema for creating a product. Price is in naira, at most 2 decimals."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    stock_level: int = Field(..., ge=0)
    category_id: str

    @field_validator("category_id")
    @classmethod
    def check_category_id(cls, value: str) -> str:
        return _check_id(value, EntityPrefix.CATEGORY, "categoryId")


class ProductUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=2000)
    price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    stock_level: int | None = Field(None, ge=0)
    category_id: str | None = None

    @field_validator("category_id")
    @classmethod
    def check_category_id(cls, value: str | None) -> str | None:
        return _check_id(value, EntityPrefix.CATEGORY, "categoryId")


class ProductOut(CamelModel):
    id: str
    sku: str
    name: str
    description: str
    price: Decimal
    unit_price: int
    currency: str
    stock_level: int
    created_by: str
    category_id: str
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductQuery(CamelModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_by: Literal["created_at", "name", "price", "stock_level"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    category_id: str | None = None
    search: str | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)
    in_stock: bool | None = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ProductPage(CamelModel):
    data: List[ProductOut]
    pagination: Pagination


# ---------- cart ----------

class AddCartItemIn(CamelModel):
    """Schema for adding a product to the cart."""

    product_id: str
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")

    @field_validator("product_id")
    @classmethod
    def check_product_id(cls, value: str) -> str:
        return _check_id(value, EntityPrefix.PRODUCT, "productId")


class UpdateCartItemIn(CamelModel):
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")


class CartItemOut(CamelModel):
    product_id: str
    sku: str
    name: str
    price: Decimal
    unit_price_minor: int
    currency: str
    quantity: int
    line_total_minor: int
    line_total_major: Decimal


class CartOut(CamelModel):
    """Cart view with totals in kobo (minor) and naira (major, display only)."""

    id: str
    items: List[CartItemOut]
    subtotal_minor: int
    subtotal_major: Decimal
