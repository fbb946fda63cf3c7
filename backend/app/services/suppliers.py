"""Supplier registration and stock reconciliation.

Registering a supplier records a delivery: the supplier's declared `stock`
is added to the linked product's running stock. Both writes belong to one
transaction, so a reader never sees the increment without the supplier
row or the row without the increment.

Checks run in this order, all before anything is written:
  1. supplierId, productId, email, Name present   → MissingFieldError
  2. product exists                               → ProductNotFoundError
  3. supplierId fragment is all digits            → InvalidIdentifierFragmentError
  4. minted supplierId not in use                 → DuplicateIdentifierError
  5. contactNo, if given, is exactly 10 digits    → InvalidPhoneFormatError

Then: atomic stock increment → supplier insert → commit. A lost race on
the unique index, or the product disappearing in between, rolls the whole
transaction back. A delivery that would push the product's total past
STOCK_MAX is refused with StockLimitExceededError and writes nothing.

Later supplier updates and deletes never touch product stock.
"""

import logging
from dataclasses import dataclass

from app.middleware.exceptions import (
    DuplicateIdentifierError,
    InvalidPhoneFormatError,
    MissingFieldError,
    ProductNotFoundError,
    StockLimitExceededError,
    SupplierNotFoundError,
)
from app.models.product import STOCK_MAX, Product
from app.models.supplier import Supplier
from app.schemas.supplier import SupplierCreate, SupplierUpdate
from app.schemas.validators import is_blank, is_valid_contact_no, missing_fields
from app.services.catalog_store import CatalogStore
from app.services.products import PRODUCT_CACHE_PATTERN
from app.utils.cache import invalidate_cache
from app.utils.identifiers import mint_supplier_id

logger = logging.getLogger(__name__)


@dataclass
class SupplierRegistration:
    supplier: Supplier
    product: Product


def _normalize_contact_no(value: str | None) -> str | None:
    if is_blank(value):
        return None
    if not is_valid_contact_no(value):
        raise InvalidPhoneFormatError(value)
    return value


async def register_supplier(store: CatalogStore, body: SupplierCreate) -> SupplierRegistration:
    """Register a supplier delivery and reconcile the product's stock."""
    # ── 1. Required fields ────────────────────────────────────
    missing = missing_fields({
        "supplierId": body.supplier_id,
        "productId": body.product_id,
        "email": body.email,
        "Name": body.name,
    })
    if missing:
        raise MissingFieldError(missing)

    product_id = body.product_id

    # ── 2. Linked product ─────────────────────────────────────
    if not await store.product_exists(product_id):
        raise ProductNotFoundError(product_id)

    # ── 3. + 4. Identifier ────────────────────────────────────
    supplier_id = mint_supplier_id(body.supplier_id)
    if await store.supplier_exists(supplier_id):
        logger.warning("Supplier identifier already in use: %s", supplier_id)
        raise DuplicateIdentifierError("Supplier", supplier_id)

    # ── 5. Contact number ─────────────────────────────────────
    contact_no = _normalize_contact_no(body.contact_no)

    # ── Reconcile: increment + insert, one transaction ────────
    if not await store.increment_stock(product_id, body.stock):
        product = await store.get_product(product_id)
        current = product.stock if product is not None else None
        await store.rollback()
        if current is None:
            raise ProductNotFoundError(product_id)
        logger.warning(
            "Delivery of %d units would overflow stock of %s (%d)",
            body.stock, product_id, current,
        )
        raise StockLimitExceededError(product_id, current, body.stock, STOCK_MAX)

    supplier = Supplier(
        supplier_id=supplier_id,
        product_id=product_id,
        email=body.email,
        name=body.name,
        stock=body.stock,
        cost=body.cost,
        contact_no=contact_no,
    )
    await store.insert_supplier(supplier)

    # Read back inside the transaction: stock reflects exactly this delivery
    product = await store.get_product(product_id)
    await store.refresh(product)
    await store.commit("supplier", supplier_id)
    await invalidate_cache(PRODUCT_CACHE_PATTERN)

    logger.info(
        "Supplier %s delivered %d units of %s; stock now %d",
        supplier_id, body.stock, product_id, product.stock,
    )
    return SupplierRegistration(supplier=supplier, product=product)


async def list_suppliers(store: CatalogStore) -> list[Supplier]:
    """All supplier records, newest first."""
    return await store.find_suppliers()


async def update_supplier(
    store: CatalogStore, supplier_id: str, body: SupplierUpdate
) -> Supplier:
    """Partial update of contact and delivery fields. No stock reconciliation."""
    values = body.model_dump(exclude_unset=True)

    blank = [
        wire for field, wire in (("email", "email"), ("name", "Name"))
        if field in values and is_blank(values[field])
    ]
    if blank:
        raise MissingFieldError(blank)
    if "contact_no" in values:
        values["contact_no"] = _normalize_contact_no(values["contact_no"])
    values = {
        k: v for k, v in values.items()
        if v is not None or k == "contact_no"
    }

    supplier = await store.update_supplier(supplier_id, values)
    if supplier is None:
        raise SupplierNotFoundError(supplier_id)
    await store.commit("supplier", supplier_id)

    logger.info("Updated supplier %s: %s", supplier_id, sorted(values))
    return supplier


async def delete_supplier(store: CatalogStore, supplier_id: str) -> None:
    """Delete a supplier record. The product's stock is left as is."""
    if not await store.delete_supplier(supplier_id):
        raise SupplierNotFoundError(supplier_id)
    await store.commit("supplier", supplier_id)

    logger.info("Deleted supplier %s", supplier_id)
