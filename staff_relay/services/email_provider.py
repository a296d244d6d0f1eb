"""
Email Providers

Transactional delivery for relayed contact messages. Each provider makes a
single attempt per message; retries are left to the visitor resubmitting.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

import httpx

from staff_relay.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    reply_to: str
    subject: str
    html_body: str
    text_body: str

    def __repr__(self) -> str:
        return f"EmailMessage(subject_len={len(self.subject)}, html_len={len(self.html_body)})"


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailProvider(Protocol):
    """Protocol for email providers."""

    name: str

    @property
    def is_configured(self) -> bool:
        ...

    async def send(self, message: EmailMessage, sender: str) -> SendResult:
        """Send one message from the given sender."""
        ...

    async def close(self) -> None:
        ...


class _HTTPEmailProvider:
    """Shared lazy httpx client handling for HTTP API providers."""

    name = "http"
    BASE_URL = ""

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._http_client

    async def close(self):
        """Explicit cleanup method."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()


class ResendProvider(_HTTPEmailProvider):
    """Resend transactional email API."""

    name = "resend"
    BASE_URL = "https://api.resend.com"

    async def send(self, message: EmailMessage, sender: str) -> SendResult:
        http = await self._get_http_client()

        payload = {
            "from": sender,
            "to": [message.to],
            "reply_to": message.reply_to,
            "subject": message.subject,
            "html": message.html_body,
            "text": message.text_body,
        }

        try:
            resp = await http.post("/emails", json=payload)
        except httpx.HTTPError as e:
            return SendResult(success=False, error=f"{type(e).__name__}: {e}")

        if resp.status_code in (200, 201):
            try:
                message_id = resp.json().get("id")
            except ValueError:
                message_id = None
            return SendResult(success=True, message_id=message_id)
        return SendResult(success=False, error=f"Resend returned {resp.status_code}: {resp.text}")


class SendGridProvider(_HTTPEmailProvider):
    """SendGrid v3 mail send API."""

    name = "sendgrid"
    BASE_URL = "https://api.sendgrid.com/v3"

    def __init__(
        self,
        api_key: str,
        from_name: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, timeout=timeout, transport=transport)
        self.from_name = from_name

    async def send(self, message: EmailMessage, sender: str) -> SendResult:
        http = await self._get_http_client()

        from_field = {"email": sender}
        if self.from_name:
            from_field["name"] = self.from_name

        payload = {
            "personalizations": [{
                "to": [{"email": message.to}],
            }],
            "from": from_field,
            "reply_to": {"email": message.reply_to},
            "subject": message.subject,
            # SendGrid requires text/plain before text/html
            "content": [
                {"type": "text/plain", "value": message.text_body},
                {"type": "text/html", "value": message.html_body},
            ],
        }

        try:
            resp = await http.post("/mail/send", json=payload)
        except httpx.HTTPError as e:
            return SendResult(success=False, error=f"{type(e).__name__}: {e}")

        if resp.status_code in (200, 202):
            return SendResult(
                success=True,
                message_id=resp.headers.get("X-Message-Id"),
            )
        return SendResult(success=False, error=f"SendGrid returned {resp.status_code}: {resp.text}")


class MockEmailProvider:
    """Mock provider for development/testing. Keeps messages in memory."""

    name = "mock"

    def __init__(self):
        self.sent: List[EmailMessage] = []
        self.senders: List[str] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def send(self, message: EmailMessage, sender: str) -> SendResult:
        self.sent.append(message)
        self.senders.append(sender)
        logger.info(
            f"[MOCK EMAIL] Contact message captured: "
            f"subject_len={len(message.subject)}, text_len={len(message.text_body)}"
        )
        return SendResult(success=True, message_id=f"mock-{len(self.sent)}")

    async def close(self) -> None:
        return None


def get_email_provider(app_settings) -> EmailProvider:
    """Build the provider named by EMAIL_PROVIDER."""
    provider_name = app_settings.EMAIL_PROVIDER
    if provider_name == "resend":
        provider = ResendProvider(
            api_key=app_settings.RESEND_API_KEY,
            timeout=app_settings.EMAIL_HTTP_TIMEOUT,
        )
    elif provider_name == "sendgrid":
        provider = SendGridProvider(
            api_key=app_settings.SENDGRID_API_KEY,
            from_name=app_settings.SENDGRID_FROM_NAME,
            timeout=app_settings.EMAIL_HTTP_TIMEOUT,
        )
    elif provider_name == "mock":
        provider = MockEmailProvider()
    else:
        raise ConfigurationError(details={"provider": provider_name})

    if not provider.is_configured:
        logger.warning(f"{provider_name} API key not configured")
    return provider
