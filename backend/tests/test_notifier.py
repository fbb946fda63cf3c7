"""Low-stock notifier and email rendering tests."""

import re

import pytest

from app.middleware.exceptions import (
    DeliveryFailedError,
    MissingFieldError,
    ProductNotFoundError,
    SupplierNotFoundError,
)
from app.services.email import DeliveryStatus, html_to_text
from app.services.notifier import notify_supplier
from app.services.templates import render_low_stock_email


@pytest.mark.integration
@pytest.mark.asyncio
class TestNotifySupplier:

    async def test_sends_one_email_with_product_details(
        self, store, email_client, make_product, make_supplier
    ):
        await make_product("BYNPD00042", name="Wireless Mouse", stock=2)
        await make_supplier("BYNSP00007", "BYNPD00042", name="Acme Traders", email="orders@acme.test")

        receipt = await notify_supplier(store, email_client, "BYNPD00042")

        assert len(email_client.sent) == 1
        sent = email_client.sent[0]
        assert sent.to == "orders@acme.test"
        assert sent.subject == "Resupply Request: Wireless Mouse"
        assert "Wireless Mouse" in sent.html
        assert "BYNPD00042" in sent.html
        assert "<b>Current Stock:</b> 2" in sent.html
        assert "Acme Traders" in sent.html

        assert receipt.product_id == "BYNPD00042"
        assert receipt.supplier_id == "BYNSP00007"
        assert receipt.recipient == "orders@acme.test"
        assert receipt.delivery_status == 202
        assert receipt.provider_message_id == "msg-test-1"

    async def test_text_fallback_has_no_markup(self, store, email_client, make_product, make_supplier):
        await make_product("BYNPD00042", name="Wireless Mouse", stock=2)
        await make_supplier("BYNSP00007", "BYNPD00042")

        await notify_supplier(store, email_client, "BYNPD00042")

        text = html_to_text(email_client.sent[0].html)
        assert not re.search(r"<[^>]+>", text)
        assert "Wireless Mouse" in text
        assert "BYNPD00042" in text
        assert "Current Stock: 2" in text

    async def test_missing_product(self, store, email_client):
        with pytest.raises(ProductNotFoundError):
            await notify_supplier(store, email_client, "BYNPD09999")
        assert email_client.sent == []

    async def test_no_linked_supplier(self, store, email_client, make_product, make_supplier):
        await make_product("BYNPD00001")
        await make_product("BYNPD00002")
        await make_supplier("BYNSP00001", "BYNPD00002")

        with pytest.raises(SupplierNotFoundError):
            await notify_supplier(store, email_client, "BYNPD00001")
        assert email_client.sent == []

    async def test_product_id_required(self, store, email_client):
        with pytest.raises(MissingFieldError):
            await notify_supplier(store, email_client, "")

    async def test_most_recent_supplier_wins(
        self, store, email_client, make_product, make_supplier
    ):
        await make_product("BYNPD00001")
        await make_supplier("BYNSP00001", "BYNPD00001", email="old@supplier.test")
        await make_supplier("BYNSP00002", "BYNPD00001", email="new@supplier.test")

        receipt = await notify_supplier(store, email_client, "BYNPD00001")

        assert receipt.supplier_id == "BYNSP00002"
        assert email_client.sent[0].to == "new@supplier.test"

    async def test_explicit_supplier(self, store, email_client, make_product, make_supplier):
        await make_product("BYNPD00001")
        await make_supplier("BYNSP00001", "BYNPD00001", email="old@supplier.test")
        await make_supplier("BYNSP00002", "BYNPD00001", email="new@supplier.test")

        receipt = await notify_supplier(store, email_client, "BYNPD00001", supplier_id="BYNSP00001")

        assert receipt.supplier_id == "BYNSP00001"
        assert email_client.sent[0].to == "old@supplier.test"

    async def test_explicit_supplier_must_be_linked(
        self, store, email_client, make_product, make_supplier
    ):
        await make_product("BYNPD00001")
        await make_product("BYNPD00002")
        await make_supplier("BYNSP00001", "BYNPD00001")
        await make_supplier("BYNSP00002", "BYNPD00002")

        with pytest.raises(SupplierNotFoundError):
            await notify_supplier(store, email_client, "BYNPD00001", supplier_id="BYNSP00002")
        assert email_client.sent == []

    async def test_delivery_failure_is_surfaced(
        self, store, email_client, make_product, make_supplier, fetch_product
    ):
        await make_product("BYNPD00001", stock=3)
        await make_supplier("BYNSP00001", "BYNPD00001")
        email_client.status = DeliveryStatus(ok=False, status_code=500, reason="boom")

        with pytest.raises(DeliveryFailedError) as exc_info:
            await notify_supplier(store, email_client, "BYNPD00001")

        details = exc_info.value.details
        assert details["product_id"] == "BYNPD00001"
        assert details["supplier_id"] == "BYNSP00001"
        assert details["delivery_status"] == 500
        assert len(email_client.sent) == 1
        assert (await fetch_product("BYNPD00001")).stock == 3


@pytest.mark.unit
class TestRenderLowStockEmail:

    def test_subject(self):
        email = render_low_stock_email("Acme", "Desk Lamp", "BYNPD00003", 1)
        assert email.subject == "Resupply Request: Desk Lamp"

    def test_values_are_escaped(self):
        email = render_low_stock_email("<script>x</script>", "A & B", "BYNPD00003", 0)
        assert "<script>" not in email.html
        assert "&lt;script&gt;" in email.html
        assert "A &amp; B" in email.html


@pytest.mark.unit
class TestHtmlToText:

    def test_line_breaks_become_newlines(self):
        assert html_to_text("one<br>two<BR/>three<br />four") == "one\ntwo\nthree\nfour"

    def test_tags_are_stripped_and_trimmed(self):
        assert html_to_text("  <p>Hello <b>there</b></p>  ") == "Hello there"
