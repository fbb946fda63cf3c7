"""Aggregate model imports for Alembic auto-detection."""

from app.models.product import Product  # noqa: F401
from app.models.supplier import Supplier  # noqa: F401
