"""Pydantic schemas for supplier linkage records.

The contact name travels as "Name" on the wire; the other fields are
camelCase (supplierId, productId, contactNo).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.product import ProductOut
from app.models.product import STOCK_MAX
from app.schemas.validators import coerce_text

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Create ──────────────────────────────────────────────────

class SupplierCreate(BaseModel):
    """Register a supplier delivery.

    supplierId is the raw numeric fragment; productId is the product's
    canonical identifier ("BYNPD00042"). `stock` is added to the product.
    """
    model_config = _camel

    supplier_id: str | StrictInt | None = None
    product_id: str | None = None
    email: str | None = None
    name: str | None = Field(None, alias="Name")
    stock: int = Field(0, ge=0, le=STOCK_MAX)
    cost: float = 0
    contact_no: str | None = None

    @field_validator("supplier_id", "product_id", "email", "name", "contact_no", mode="before")
    @classmethod
    def _coerce(cls, v):
        return coerce_text(v)


# ── Update ──────────────────────────────────────────────────

class SupplierUpdate(BaseModel):
    """Partial update; supplierId and productId are fixed at creation."""
    model_config = _camel

    email: str | None = None
    name: str | None = Field(None, alias="Name")
    stock: int | None = Field(None, ge=0, le=STOCK_MAX)
    cost: float | None = None
    contact_no: str | None = None

    @field_validator("email", "name", "contact_no", mode="before")
    @classmethod
    def _coerce(cls, v):
        return coerce_text(v)


# ── Response ────────────────────────────────────────────────

class SupplierOut(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    supplier_id: str
    product_id: str
    email: str
    name: str = Field(alias="Name")
    stock: int
    cost: float = 0
    contact_no: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SupplierRegistrationOut(BaseModel):
    model_config = _camel

    message: str
    supplier: SupplierOut
    updated_product: ProductOut
