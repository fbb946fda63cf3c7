"""Catalog persistence over an AsyncSession.

CatalogStore is the only place that talks SQL for products and suppliers.
It is keyed by canonical identifiers (product_id / supplier_id), never by
the surrogate `id`.

Unit of work:
  - writes are flushed, not committed; the calling service decides when
    the operation is complete and calls commit()
  - any storage fault on a write (increment, update, delete, commit)
    rolls back and surfaces as StorageFailureError naming entity and stage
  - increment_stock() is a single UPDATE ... SET stock = stock + :k, so
    concurrent deliveries against one product serialize on the row (or
    database) write lock instead of racing in Python

Uniqueness of identifiers is enforced by the unique indexes on
products.product_id and suppliers.supplier_id; insert_* turn a violated
index into DuplicateIdentifierError after rolling back.
"""

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import (
    DuplicateIdentifierError,
    ProductNotFoundError,
    StorageFailureError,
)
from app.models.product import CATEGORY_SEPARATOR, STOCK_MAX, Product, category_key, utcnow
from app.models.supplier import Supplier

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CatalogStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _write(self, stmt, entity: str, identifier: str, stage: str):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception("Storage failure (%s) for %s %s", stage, entity, identifier)
            await self.db.rollback()
            raise StorageFailureError(entity, identifier, stage=stage, reason=str(e)) from e

    async def _flush(self, entity: str, identifier: str, stage: str) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.exception("Storage failure (%s) for %s %s", stage, entity, identifier)
            await self.db.rollback()
            raise StorageFailureError(entity, identifier, stage=stage, reason=str(e)) from e

    # ── Products ─────────────────────────────────────────────

    async def get_product(self, product_id: str) -> Product | None:
        result = await self.db.execute(
            select(Product).where(Product.product_id == product_id)
        )
        return result.scalar_one_or_none()

    async def product_exists(self, product_id: str) -> bool:
        result = await self.db.execute(
            select(func.count(Product.id)).where(Product.product_id == product_id)
        )
        return (result.scalar() or 0) > 0

    async def find_products(
        self,
        *,
        include_hidden: bool = False,
        name_contains: str | None = None,
        category: str | None = None,
    ) -> list[Product]:
        stmt = select(Product)
        if not include_hidden:
            stmt = stmt.where(Product.is_available == True)  # noqa: E712
        if name_contains:
            pattern = f"%{_escape_like(name_contains)}%"
            stmt = stmt.where(Product.name.ilike(pattern, escape="\\"))
        if category is not None:
            token = CATEGORY_SEPARATOR + category_key(category) + CATEGORY_SEPARATOR
            stmt = stmt.where(Product.category_keys.contains(token, autoescape=True))
        stmt = stmt.order_by(Product.created_at.desc(), Product.product_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def insert_product(self, product: Product) -> Product:
        self.db.add(product)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if await self.product_exists(product.product_id):
                logger.warning("Product identifier collision on insert: %s", product.product_id)
                raise DuplicateIdentifierError("Product", product.product_id) from e
            raise StorageFailureError(
                "product", product.product_id, stage="insert", reason=str(e.orig)
            ) from e
        return product

    async def update_product(self, product_id: str, values: dict) -> Product | None:
        product = await self.get_product(product_id)
        if product is None:
            return None
        for field, value in values.items():
            setattr(product, field, value)
        await self._flush("product", product_id, stage="update")
        return product

    async def delete_product(self, product_id: str) -> bool:
        result = await self._write(
            delete(Product).where(Product.product_id == product_id),
            "product", product_id, stage="delete",
        )
        return result.rowcount > 0

    async def increment_stock(self, product_id: str, amount: int) -> bool:
        """Atomically add `amount` to a product's stock.

        Returns False when nothing was written: no such product, or the new
        total would pass STOCK_MAX.
        """
        result = await self._write(
            update(Product)
            .where(Product.product_id == product_id, Product.stock <= STOCK_MAX - amount)
            .values(stock=Product.stock + amount, updated_at=utcnow())
            .execution_options(synchronize_session=False),
            "product", product_id, stage="increment_stock",
        )
        return result.rowcount > 0

    # ── Suppliers ────────────────────────────────────────────

    async def get_supplier(self, supplier_id: str) -> Supplier | None:
        result = await self.db.execute(
            select(Supplier).where(Supplier.supplier_id == supplier_id)
        )
        return result.scalar_one_or_none()

    async def supplier_exists(self, supplier_id: str) -> bool:
        result = await self.db.execute(
            select(func.count(Supplier.id)).where(Supplier.supplier_id == supplier_id)
        )
        return (result.scalar() or 0) > 0

    async def find_suppliers(self, product_id: str | None = None) -> list[Supplier]:
        """Suppliers newest first, optionally only those linked to one product."""
        stmt = select(Supplier)
        if product_id is not None:
            stmt = stmt.where(Supplier.product_id == product_id)
        stmt = stmt.order_by(Supplier.created_at.desc(), Supplier.supplier_id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def latest_supplier_for(self, product_id: str) -> Supplier | None:
        result = await self.db.execute(
            select(Supplier)
            .where(Supplier.product_id == product_id)
            .order_by(Supplier.created_at.desc(), Supplier.supplier_id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert_supplier(self, supplier: Supplier) -> Supplier:
        """Insert a supplier row.

        On a constraint violation the whole transaction is rolled back
        (including any stock increment already applied in it) and the
        cause is reported: a taken supplier_id, or a product that no
        longer exists.
        """
        self.db.add(supplier)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if await self.supplier_exists(supplier.supplier_id):
                logger.warning("Supplier identifier collision on insert: %s", supplier.supplier_id)
                raise DuplicateIdentifierError("Supplier", supplier.supplier_id) from e
            if not await self.product_exists(supplier.product_id):
                raise ProductNotFoundError(supplier.product_id) from e
            raise StorageFailureError(
                "supplier", supplier.supplier_id, stage="insert", reason=str(e.orig)
            ) from e
        return supplier

    async def update_supplier(self, supplier_id: str, values: dict) -> Supplier | None:
        supplier = await self.get_supplier(supplier_id)
        if supplier is None:
            return None
        for field, value in values.items():
            setattr(supplier, field, value)
        await self._flush("supplier", supplier_id, stage="update")
        return supplier

    async def delete_supplier(self, supplier_id: str) -> bool:
        result = await self._write(
            delete(Supplier).where(Supplier.supplier_id == supplier_id),
            "supplier", supplier_id, stage="delete",
        )
        return result.rowcount > 0

    # ── Unit of work ─────────────────────────────────────────

    async def refresh(self, instance) -> None:
        await self.db.refresh(instance)

    async def commit(self, entity: str, identifier: str) -> None:
        """Commit the current transaction.

        Raises:
            StorageFailureError: stage "commit"; the transaction is rolled back
        """
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.exception("Commit failed for %s %s", entity, identifier)
            await self.db.rollback()
            raise StorageFailureError(entity, identifier, stage="commit", reason=str(e)) from e

    async def rollback(self) -> None:
        await self.db.rollback()
