"""
Tests for settings validation.
"""
import pytest

from staff_relay.core.config import DEFAULT_CORS_ORIGINS, Settings

STRONG_SECRET = "k7Qz0vX2pL9sR4tW8yB1nM6c"


def _settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "development",
        "HASH_SECRET": STRONG_SECRET,
        "EMAIL_PROVIDER": "mock",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestProductionChecks:

    def test_valid_production_config(self):
        settings = _settings(
            ENVIRONMENT="production",
            EMAIL_PROVIDER="resend",
            RESEND_API_KEY="re_live",
            RESEND_FROM="relay@example.net",
            CORS_ORIGINS="https://contact.example.org",
        )
        assert settings.email_sender == "relay@example.net"

    @pytest.mark.parametrize("secret", ["default-secret", "short"])
    def test_weak_secret_rejected(self, secret):
        with pytest.raises(ValueError, match="HASH_SECRET"):
            _settings(ENVIRONMENT="production", EMAIL_PROVIDER="resend", HASH_SECRET=secret)

    def test_debug_rejected(self):
        with pytest.raises(ValueError, match="DEBUG"):
            _settings(ENVIRONMENT="production", EMAIL_PROVIDER="resend", DEBUG=True)

    def test_mock_provider_rejected(self):
        with pytest.raises(ValueError, match="mock"):
            _settings(ENVIRONMENT="production", EMAIL_PROVIDER="mock")

    def test_development_allows_weak_secret(self):
        assert _settings(HASH_SECRET="default-secret").HASH_SECRET == "default-secret"


class TestParsing:

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError, match="EMAIL_PROVIDER"):
            _settings(EMAIL_PROVIDER="pigeon")

    def test_forwarded_for_untrusted_by_default(self):
        assert _settings().TRUST_FORWARDED_FOR is False
        assert _settings(TRUST_FORWARDED_FOR=True).TRUST_FORWARDED_FOR is True

    def test_provider_name_normalized(self):
        assert _settings(EMAIL_PROVIDER=" SendGrid ").EMAIL_PROVIDER == "sendgrid"

    def test_sender_follows_provider(self):
        settings = _settings(
            EMAIL_PROVIDER="sendgrid",
            RESEND_FROM="resend@example.net",
            SENDGRID_FROM_EMAIL="sendgrid@example.net",
        )
        assert settings.email_sender == "sendgrid@example.net"

    def test_cors_comma_separated(self):
        settings = _settings(CORS_ORIGINS="https://a.example.org, https://b.example.org")
        assert settings.CORS_ORIGINS == ["https://a.example.org", "https://b.example.org"]

    def test_cors_json_array(self):
        settings = _settings(CORS_ORIGINS='["https://a.example.org"]')
        assert settings.CORS_ORIGINS == ["https://a.example.org"]

    def test_cors_empty_uses_defaults(self):
        assert _settings(CORS_ORIGINS="").CORS_ORIGINS == DEFAULT_CORS_ORIGINS
