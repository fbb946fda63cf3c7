"""Low-stock supplier notification.

Resolves product → linked supplier, renders the resupply alert and hands
it to the email client. Fails closed: a missing product, a missing
linkage or a failed delivery each raise, and nothing is sent unless both
sides of the link resolve. No catalog state is changed.

When several suppliers serve one product the caller may name one with
`supplier_id`; otherwise the most recently registered linkage is used.
"""

import logging
from dataclasses import dataclass

from app.middleware.exceptions import (
    DeliveryFailedError,
    MissingFieldError,
    ProductNotFoundError,
    SupplierNotFoundError,
)
from app.schemas.validators import is_blank
from app.services.catalog_store import CatalogStore
from app.services.email import EmailClient
from app.services.templates import render_low_stock_email

logger = logging.getLogger(__name__)


@dataclass
class NotificationReceipt:
    product_id: str
    supplier_id: str
    recipient: str
    subject: str
    delivery_status: int | None
    provider_message_id: str | None = None


async def notify_supplier(
    store: CatalogStore,
    email_client: EmailClient,
    product_id: str | None,
    supplier_id: str | None = None,
) -> NotificationReceipt:
    if is_blank(product_id):
        raise MissingFieldError(["productId"])

    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    if is_blank(supplier_id):
        supplier = await store.latest_supplier_for(product_id)
        if supplier is None:
            raise SupplierNotFoundError(
                product_id, message=f"No supplier linked to product {product_id}"
            )
    else:
        supplier = await store.get_supplier(supplier_id)
        if supplier is None or supplier.product_id != product_id:
            raise SupplierNotFoundError(
                supplier_id,
                message=f"Supplier {supplier_id} is not linked to product {product_id}",
            )

    email = render_low_stock_email(
        supplier_name=supplier.name,
        product_name=product.name,
        product_id=product.product_id,
        stock=product.stock,
    )
    status = await email_client.send(supplier.email, email.subject, email.html)

    if not status.ok:
        logger.error(
            "Low-stock notification for %s to supplier %s failed (status=%s): %s",
            product_id, supplier.supplier_id, status.status_code, status.reason,
        )
        raise DeliveryFailedError(
            product_id, supplier.supplier_id, status.status_code, status.reason
        )

    logger.info(
        "Low-stock notification for %s sent to supplier %s <%s>",
        product_id, supplier.supplier_id, supplier.email,
    )
    return NotificationReceipt(
        product_id=product.product_id,
        supplier_id=supplier.supplier_id,
        recipient=supplier.email,
        subject=email.subject,
        delivery_status=status.status_code,
        provider_message_id=status.message_id,
    )
