"""
Tests for email providers over a mocked HTTP transport.
"""
import json
import logging
from types import SimpleNamespace

import httpx
import pytest

from staff_relay.core.exceptions import ConfigurationError
from staff_relay.services.email_provider import (
    EmailMessage,
    MockEmailProvider,
    ResendProvider,
    SendGridProvider,
    get_email_provider,
)

MESSAGE = EmailMessage(
    to="gus@example.com",
    reply_to="ann@example.com",
    subject="New message from Ann",
    html_body="<p>hi</p>",
    text_body="hi",
)


def _settings(**overrides):
    values = {
        "EMAIL_PROVIDER": "resend",
        "EMAIL_HTTP_TIMEOUT": 5.0,
        "RESEND_API_KEY": "re_test",
        "SENDGRID_API_KEY": "SG.test",
        "SENDGRID_FROM_NAME": "Relay",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestResendProvider:

    @pytest.mark.anyio
    async def test_send_posts_message(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers.get("Authorization")
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "re_123"})

        provider = ResendProvider(api_key="re_test", transport=httpx.MockTransport(handler))
        result = await provider.send(MESSAGE, "relay@example.net")
        await provider.close()

        assert result.success is True
        assert result.message_id == "re_123"
        assert captured["url"] == "https://api.resend.com/emails"
        assert captured["auth"] == "Bearer re_test"
        assert captured["body"] == {
            "from": "relay@example.net",
            "to": ["gus@example.com"],
            "reply_to": "ann@example.com",
            "subject": "New message from Ann",
            "html": "<p>hi</p>",
            "text": "hi",
        }

    @pytest.mark.anyio
    async def test_rejected_send(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"message": "Invalid `to` field"})

        provider = ResendProvider(api_key="re_test", transport=httpx.MockTransport(handler))
        result = await provider.send(MESSAGE, "relay@example.net")

        assert result.success is False
        assert "422" in result.error

    @pytest.mark.anyio
    async def test_transport_error_is_a_failed_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = ResendProvider(api_key="re_test", transport=httpx.MockTransport(handler))
        result = await provider.send(MESSAGE, "relay@example.net")

        assert result.success is False
        assert "ConnectError" in result.error

    @pytest.mark.anyio
    async def test_close_releases_client(self):
        provider = ResendProvider(
            api_key="re_test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        await provider.send(MESSAGE, "relay@example.net")
        client = provider._http_client

        await provider.close()

        assert client.is_closed

    def test_configured_only_with_key(self):
        assert ResendProvider(api_key="re_test").is_configured
        assert not ResendProvider(api_key="").is_configured


class TestSendGridProvider:

    @pytest.mark.anyio
    async def test_send_posts_message(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(202, headers={"X-Message-Id": "sg-1"})

        provider = SendGridProvider(
            api_key="SG.test",
            from_name="Relay",
            transport=httpx.MockTransport(handler),
        )
        result = await provider.send(MESSAGE, "relay@example.net")

        assert result.success is True
        assert result.message_id == "sg-1"
        assert captured["url"] == "https://api.sendgrid.com/v3/mail/send"
        body = captured["body"]
        assert body["personalizations"] == [{"to": [{"email": "gus@example.com"}]}]
        assert body["from"] == {"email": "relay@example.net", "name": "Relay"}
        assert body["reply_to"] == {"email": "ann@example.com"}
        assert [part["type"] for part in body["content"]] == ["text/plain", "text/html"]

    @pytest.mark.anyio
    async def test_rejected_send(self):
        provider = SendGridProvider(
            api_key="SG.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(401)),
        )
        result = await provider.send(MESSAGE, "relay@example.net")

        assert result.success is False
        assert "401" in result.error


class TestMockEmailProvider:

    @pytest.mark.anyio
    async def test_records_without_logging_content(self, caplog):
        provider = MockEmailProvider()

        with caplog.at_level(logging.INFO):
            result = await provider.send(MESSAGE, "relay@example.net")

        assert result.success is True
        assert result.message_id == "mock-1"
        assert provider.sent == [MESSAGE]
        assert provider.senders == ["relay@example.net"]
        assert "gus@example.com" not in caplog.text
        assert "ann@example.com" not in caplog.text


class TestGetEmailProvider:

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("resend", ResendProvider),
            ("sendgrid", SendGridProvider),
            ("mock", MockEmailProvider),
        ],
    )
    def test_selects_provider(self, name, expected):
        assert isinstance(get_email_provider(_settings(EMAIL_PROVIDER=name)), expected)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            get_email_provider(_settings(EMAIL_PROVIDER="carrier-pigeon"))

    def test_missing_key_still_builds(self, caplog):
        with caplog.at_level(logging.WARNING):
            provider = get_email_provider(_settings(RESEND_API_KEY=""))
        assert not provider.is_configured
        assert "not configured" in caplog.text
