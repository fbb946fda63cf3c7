"""Outbound email for supplier notifications.

EmailClient.send(to, subject, html) returns a DeliveryStatus instead of
raising, so callers decide what a failed delivery means. The only real
transport is SendGrid, through its Python SDK; a 202 Accepted is success
and the X-Message-Id header carries the message id.

The SDK is blocking, so each send runs in the threadpool. Every message
carries a plain-text part derived from the HTML body. Nothing here retries.
"""

import logging
import re
from dataclasses import dataclass

from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from starlette.concurrency import run_in_threadpool

from app.config import settings

logger = logging.getLogger(__name__)

_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")


def html_to_text(html: str) -> str:
    """Plain-text fallback: <br> becomes a newline, other tags are dropped."""
    return _TAG.sub("", _BR.sub("\n", html)).strip()


@dataclass
class DeliveryStatus:
    ok: bool
    status_code: int | None = None
    message_id: str | None = None
    reason: str | None = None


class EmailClient:
    """Transport seam. Subclasses deliver; they report, never raise."""

    async def send(self, to: str, subject: str, html: str) -> DeliveryStatus:
        raise NotImplementedError


class SendGridEmailClient(EmailClient):
    def __init__(
        self,
        api_key: str,
        sender: str,
        host: str = "https://api.sendgrid.com",
        timeout: float = 10.0,
        client: SendGridAPIClient | None = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.host = host
        self.timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender)

    def _sendgrid(self) -> SendGridAPIClient:
        if self._client is None:
            self._client = SendGridAPIClient(api_key=self.api_key, host=self.host)
            self._client.client.timeout = self.timeout
        return self._client

    def build_message(self, to: str, subject: str, html: str) -> Mail:
        return Mail(
            from_email=self.sender,
            to_emails=to,
            subject=subject,
            plain_text_content=html_to_text(html),
            html_content=html,
        )

    async def send(self, to: str, subject: str, html: str) -> DeliveryStatus:
        if not self.configured:
            logger.error("SendGrid is not configured; message to %s not sent", to)
            return DeliveryStatus(ok=False, reason="email transport not configured")

        message = self.build_message(to, subject, html)
        try:
            response = await run_in_threadpool(self._sendgrid().send, message)
        except HTTPError as e:
            logger.error("SendGrid rejected message to %s with status %s", to, e.status_code)
            body = e.body.decode("utf-8", "replace") if isinstance(e.body, bytes) else e.body
            return DeliveryStatus(
                ok=False, status_code=e.status_code, reason=(body or "")[:200] or None
            )
        except OSError as e:
            # URLError and socket timeouts
            logger.error("SendGrid request failed: %s", e)
            return DeliveryStatus(ok=False, reason=str(e) or type(e).__name__)

        if response.status_code != 202:
            logger.error(
                "SendGrid answered message to %s with status %s",
                to, response.status_code,
            )
            return DeliveryStatus(ok=False, status_code=response.status_code)

        return DeliveryStatus(
            ok=True,
            status_code=response.status_code,
            message_id=response.headers.get("X-Message-Id"),
        )


def get_email_client() -> EmailClient:
    """FastAPI dependency; overridden in tests."""
    return SendGridEmailClient(
        api_key=settings.sendgrid_api_key,
        sender=settings.sendgrid_from,
        host=settings.sendgrid_host,
        timeout=settings.email_timeout_seconds,
    )
