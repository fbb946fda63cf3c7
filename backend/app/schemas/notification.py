"""Pydantic schemas for the low-stock supplier notification."""

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.validators import coerce_text

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotifyRequest(BaseModel):
    """productId is canonical; supplierId (canonical, optional) picks the
    linkage when several suppliers serve the product."""
    model_config = _camel

    product_id: str | None = None
    supplier_id: str | None = None

    @field_validator("product_id", "supplier_id", mode="before")
    @classmethod
    def _coerce(cls, v):
        return coerce_text(v)


class NotificationReceiptOut(BaseModel):
    model_config = _camel

    message: str
    product_id: str
    supplier_id: str
    recipient: str
    subject: str
    delivery_status: int | None = None
    provider_message_id: str | None = None
