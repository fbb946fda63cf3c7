"""Product catalog service.

Registration mints the canonical productId from the caller's numeric
fragment and relies on the unique index as the final word on collisions.
Reads honour visibility: callers without the admin capability only ever
see products with isAvailable = true.

Listings are cached in Redis under "products:*" and invalidated on every
product or supplier write.
"""

import logging

from pydantic import TypeAdapter

from app.config import settings
from app.middleware.exceptions import (
    DuplicateIdentifierError,
    MissingFieldError,
    ProductNotFoundError,
)
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductOut, ProductUpdate
from app.schemas.validators import is_blank, missing_fields
from app.services.catalog_store import CatalogStore
from app.utils.cache import cached, invalidate_cache
from app.utils.identifiers import mint_product_id

logger = logging.getLogger(__name__)

PRODUCT_CACHE_PATTERN = "products:*"

_product_list = TypeAdapter(list[ProductOut])


# ── Registration ────────────────────────────────────────────

async def register_product(store: CatalogStore, body: ProductCreate) -> Product:
    """Create a product under a freshly minted identifier.

    Raises:
        MissingFieldError: productId fragment or name absent
        InvalidIdentifierFragmentError: fragment is not all digits
        DuplicateIdentifierError: identifier taken (pre-check or unique index)
    """
    missing = missing_fields({"productId": body.product_id, "name": body.name})
    if missing:
        raise MissingFieldError(missing)

    product_id = mint_product_id(body.product_id)

    if await store.product_exists(product_id):
        logger.warning("Product identifier already in use: %s", product_id)
        raise DuplicateIdentifierError("Product", product_id)

    product = Product(
        product_id=product_id,
        name=body.name,
        description=body.description,
        categories=body.categories,
        images=body.images,
        labelled_price=body.labelled_price,
        price=body.price,
        stock=body.stock,
        is_available=body.is_available,
    )
    await store.insert_product(product)
    await store.commit("product", product_id)
    await invalidate_cache(PRODUCT_CACHE_PATTERN)

    logger.info("Registered product %s (%s)", product_id, product.name)
    return product


# ── Reads ───────────────────────────────────────────────────

@cached(ttl=settings.product_cache_ttl, prefix="products", loader=_product_list.validate_python)
async def list_products(store: CatalogStore, *, include_hidden: bool) -> list[ProductOut]:
    products = await store.find_products(include_hidden=include_hidden)
    return [ProductOut.model_validate(p) for p in products]


async def search_products(
    store: CatalogStore, query: str | None, *, include_hidden: bool
) -> list[Product]:
    """Case-insensitive substring match on name. Empty query → []."""
    if is_blank(query):
        return []
    return await store.find_products(
        include_hidden=include_hidden, name_contains=query.strip()
    )


async def get_product(store: CatalogStore, product_id: str) -> Product:
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


async def products_by_category(
    store: CatalogStore, category: str | None, *, include_hidden: bool
) -> list[Product]:
    """Products carrying `category` (case-insensitive exact match).

    Matching runs in SQL against Product.category_keys.
    """
    if is_blank(category):
        raise MissingFieldError(["category"])

    return await store.find_products(include_hidden=include_hidden, category=category)


# ── Admin writes ────────────────────────────────────────────

async def update_product(
    store: CatalogStore, product_id: str, body: ProductUpdate
) -> Product:
    """Apply a partial update. The productId itself never changes."""
    values = body.model_dump(exclude_unset=True)
    if "name" in values and is_blank(values["name"]):
        raise MissingFieldError(["name"])
    # Explicit nulls on non-nullable columns are treated as "leave as is"
    values = {
        k: v for k, v in values.items()
        if v is not None or k == "description"
    }

    product = await store.update_product(product_id, values)
    if product is None:
        raise ProductNotFoundError(product_id)
    await store.commit("product", product_id)
    await invalidate_cache(PRODUCT_CACHE_PATTERN)

    logger.info("Updated product %s: %s", product_id, sorted(values))
    return product


async def delete_product(store: CatalogStore, product_id: str) -> None:
    """Delete a product; its supplier rows go with it."""
    if not await store.delete_product(product_id):
        raise ProductNotFoundError(product_id)
    await store.commit("product", product_id)
    await invalidate_cache(PRODUCT_CACHE_PATTERN)

    logger.info("Deleted product %s", product_id)
