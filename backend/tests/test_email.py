"""SendGrid client tests. The SDK client is replaced by a recording fake."""

from dataclasses import dataclass, field
from urllib.error import URLError

import pytest
from python_http_client.exceptions import HTTPError

from app.services.email import SendGridEmailClient, html_to_text


@dataclass
class FakeResponse:
    status_code: int = 202
    headers: dict = field(default_factory=dict)


class FakeSendGrid:
    """Stands in for SendGridAPIClient: records messages, replays a result."""

    def __init__(self, result=None):
        self.result = result if result is not None else FakeResponse()
        self.messages = []

    def send(self, message):
        self.messages.append(message)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def make_client(sdk, api_key="SG.test-key", sender="alerts@buynest.test"):
    return SendGridEmailClient(api_key=api_key, sender=sender, client=sdk)


@pytest.mark.unit
class TestHtmlToText:

    def test_breaks_and_tags(self):
        assert html_to_text("<p>Hi<br>there<BR/></p>") == "Hi\nthere"

    def test_entities_left_alone(self):
        assert html_to_text("<b>Tom &amp; Jerry</b>") == "Tom &amp; Jerry"


@pytest.mark.unit
@pytest.mark.asyncio
class TestSendGridEmailClient:

    async def test_message_shape(self):
        sdk = FakeSendGrid(FakeResponse(202, {"X-Message-Id": "abc123"}))

        status = await make_client(sdk).send(
            "orders@acme.test", "Resupply Request: Lamp", "<p>Hi<br>there</p>"
        )

        assert status.ok is True
        assert status.status_code == 202
        assert status.message_id == "abc123"

        payload = sdk.messages[0].get()
        assert payload["personalizations"][0]["to"] == [{"email": "orders@acme.test"}]
        assert payload["from"] == {"email": "alerts@buynest.test"}
        assert payload["subject"] == "Resupply Request: Lamp"
        content = {c["type"]: c["value"] for c in payload["content"]}
        assert content == {"text/plain": "Hi\nthere", "text/html": "<p>Hi<br>there</p>"}

    async def test_non_202_is_a_failure(self):
        status = await make_client(FakeSendGrid(FakeResponse(200))).send("a@b.test", "s", "<p>x</p>")
        assert status.ok is False
        assert status.status_code == 200

    async def test_rejection_is_a_failure(self):
        sdk = FakeSendGrid(HTTPError(401, "Unauthorized", b"bad key", {}))

        status = await make_client(sdk).send("a@b.test", "s", "<p>x</p>")

        assert status.ok is False
        assert status.status_code == 401
        assert status.reason == "bad key"

    async def test_network_error_is_a_failure(self):
        sdk = FakeSendGrid(URLError("connection refused"))

        status = await make_client(sdk).send("a@b.test", "s", "<p>x</p>")

        assert status.ok is False
        assert status.status_code is None
        assert "connection refused" in status.reason

    async def test_unconfigured_client_sends_nothing(self):
        sdk = FakeSendGrid()

        status = await make_client(sdk, api_key="").send("a@b.test", "s", "<p>x</p>")

        assert status.ok is False
        assert sdk.messages == []
