"""Pydantic schemas for catalog products.

Wire format is camelCase (productId, labelledPrice, isAvailable); both
spellings are accepted on input.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from app.models.product import STOCK_MAX
from app.schemas.validators import coerce_text

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Create ──────────────────────────────────────────────────

class ProductCreate(BaseModel):
    """Register a product. productId is the raw numeric fragment ("42")."""
    model_config = _camel

    product_id: str | StrictInt | None = None
    name: str | None = None
    description: str | None = None
    categories: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    labelled_price: float = 0
    price: float = 0
    stock: int = Field(0, ge=0, le=STOCK_MAX)
    is_available: bool = True

    @field_validator("product_id", "name", mode="before")
    @classmethod
    def _coerce(cls, v):
        return coerce_text(v)


# ── Update ──────────────────────────────────────────────────

class ProductUpdate(BaseModel):
    """Partial update. productId is immutable, so it is not a field here."""
    model_config = _camel

    name: str | None = None
    description: str | None = None
    categories: list[str] | None = None
    images: list[str] | None = None
    labelled_price: float | None = None
    price: float | None = None
    stock: int | None = Field(None, ge=0, le=STOCK_MAX)
    is_available: bool | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce(cls, v):
        return coerce_text(v)


# ── Queries ─────────────────────────────────────────────────

class CategoryQuery(BaseModel):
    category: str | None = None


# ── Response ────────────────────────────────────────────────

class ProductOut(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    product_id: str
    name: str
    description: str | None = None
    categories: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    labelled_price: float = 0
    price: float = 0
    stock: int
    is_available: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
