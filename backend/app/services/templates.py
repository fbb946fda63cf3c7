"""HTML rendering for outbound email. Pure functions, no I/O."""

from dataclasses import dataclass
from html import escape


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def render_low_stock_email(
    supplier_name: str,
    product_name: str,
    product_id: str,
    stock: int,
) -> RenderedEmail:
    """Resupply request sent to a product's supplier."""
    name = escape(supplier_name)
    product = escape(product_name)
    pid = escape(product_id)

    html = f"""
<div style="font-family: 'Segoe UI', Roboto, sans-serif; background-color: #f8fafc; padding: 20px; border-radius: 10px; color: #333; max-width: 600px; margin: auto;">
  <div style="text-align: center; margin-bottom: 20px;">
    <h2 style="color: #059669; margin: 0;">BuyNest Inventory Alert</h2>
    <p style="color: #64748b; font-size: 14px; margin-top: 4px;">Automated Supplier Notification</p>
    <hr style="border: none; border-top: 1px solid #e2e8f0; margin: 16px 0;" />
  </div>
  <p>Dear <strong>{name}</strong>,</p>
  <p style="font-size: 15px; line-height: 1.6;">
    This is an automated notice from the <b>BuyNest Inventory System</b>.<br>
    The following product has reached a low stock level:
  </p>
  <div style="background-color: #ecfdf5; border-left: 4px solid #10b981; padding: 12px 16px; margin: 16px 0; border-radius: 6px;">
    <p style="margin: 4px 0;"><b>Product Name:</b> {product}</p>
    <p style="margin: 4px 0;"><b>Product ID:</b> {pid}</p>
    <p style="margin: 4px 0; color: #b91c1c;"><b>Current Stock:</b> {int(stock)}</p>
  </div>
  <p style="font-size: 15px; line-height: 1.6;">
    Please arrange a <b>resupply</b> at the earliest convenience to avoid stock-out situations.
  </p>
  <div style="margin-top: 24px; text-align: center; font-size: 13px; color: #64748b;">
    <hr style="border: none; border-top: 1px solid #e2e8f0; margin-bottom: 12px;" />
    <p style="margin: 0;">Thank you,</p>
    <p style="font-weight: 600; color: #059669; margin: 4px 0;">BuyNest Inventory Management System</p>
  </div>
</div>
"""
    return RenderedEmail(
        subject=f"Resupply Request: {product_name}",
        html=html.strip(),
    )
