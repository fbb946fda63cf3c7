"""Product catalog routes.

Reads are open to anonymous callers (visible products only); every write
and the supplier notification trigger require an admin token.
"""

from fastapi import APIRouter, Depends, Query, status

from app.auth.deps import get_is_admin, get_store, require_admin
from app.schemas.notification import NotificationReceiptOut, NotifyRequest
from app.schemas.product import CategoryQuery, ProductCreate, ProductOut, ProductUpdate
from app.services import notifier, products
from app.services.catalog_store import CatalogStore
from app.services.email import EmailClient, get_email_client

router = APIRouter()


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    product = await products.register_product(store, body)
    return ProductOut.model_validate(product)


@router.get("", response_model=list[ProductOut])
async def list_products(
    admin: bool = Depends(get_is_admin),
    store: CatalogStore = Depends(get_store),
):
    """All products for admins, available ones for everyone else (cached)."""
    return await products.list_products(store, include_hidden=admin)


@router.get("/search", response_model=list[ProductOut])
async def search_products(
    query: str | None = Query(None),
    admin: bool = Depends(get_is_admin),
    store: CatalogStore = Depends(get_store),
):
    found = await products.search_products(store, query, include_hidden=admin)
    return [ProductOut.model_validate(p) for p in found]


@router.post("/category", response_model=list[ProductOut])
async def products_by_category(
    body: CategoryQuery,
    admin: bool = Depends(get_is_admin),
    store: CatalogStore = Depends(get_store),
):
    found = await products.products_by_category(store, body.category, include_hidden=admin)
    return [ProductOut.model_validate(p) for p in found]


@router.post("/notify", response_model=NotificationReceiptOut)
async def notify_supplier(
    body: NotifyRequest,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
    email_client: EmailClient = Depends(get_email_client),
):
    """Email the product's supplier a resupply request."""
    receipt = await notifier.notify_supplier(
        store, email_client, body.product_id, supplier_id=body.supplier_id
    )
    return NotificationReceiptOut(
        message="Email sent to supplier successfully",
        product_id=receipt.product_id,
        supplier_id=receipt.supplier_id,
        recipient=receipt.recipient,
        subject=receipt.subject,
        delivery_status=receipt.delivery_status,
        provider_message_id=receipt.provider_message_id,
    )


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(
    product_id: str,
    store: CatalogStore = Depends(get_store),
):
    product = await products.get_product(store, product_id)
    return ProductOut.model_validate(product)


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    product = await products.update_product(store, product_id, body)
    return ProductOut.model_validate(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    await products.delete_product(store, product_id)
