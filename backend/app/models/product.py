"""Catalog products.

`product_id` is the canonical business key ("BYNPD" + zero-padded numeral)
and is what every API and supplier linkage refers to. `id` is an internal
surrogate key only.

`stock` is a running total. It changes through an atomic SQL increment
when a supplier delivery is registered, or through an explicit admin
update; never through a Python read-modify-write. It is an int4 column,
so no stock value or running total may exceed STOCK_MAX.

`category_keys` mirrors `categories` as separator-delimited match keys
(trimmed, casefolded) so category lookups run in SQL on every backend.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from app.database import Base

STOCK_MAX = 2**31 - 1

CATEGORY_SEPARATOR = "\x1f"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def category_key(value: str) -> str:
    return value.strip().casefold().replace(CATEGORY_SEPARATOR, "")


def build_category_keys(categories) -> str:
    keys = [category_key(c) for c in categories or [] if isinstance(c, str)]
    keys = [k for k in keys if k]
    if not keys:
        return ""
    return CATEGORY_SEPARATOR + CATEGORY_SEPARATOR.join(keys) + CATEGORY_SEPARATOR


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    product_id: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    categories: Mapped[list] = mapped_column(JSON, default=list)
    category_keys: Mapped[str] = mapped_column(Text, default="", nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list)
    labelled_price: Mapped[float] = mapped_column(Float, default=0)
    price: Mapped[float] = mapped_column(Float, default=0)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    @validates("categories")
    def _sync_category_keys(self, key, value):
        self.category_keys = build_category_keys(value)
        return value
