"""
Application configuration

Loaded from the environment and .env. Defaults are the production ones:
DEBUG off, no HASH_SECRET, a real email provider. Construction fails when a
production deployment is configured in a way that would leak or misroute mail.
"""
import json
import logging
import os
from typing import List, Union

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

# Well-known placeholder secrets; a production HASH_SECRET may not be one
INSECURE_SECRETS = {
    "default-secret",
    "change-in-production",
    "changeme",
    "secret",
    "password",
}
MIN_SECRET_LENGTH = 16

EMAIL_PROVIDERS = ("resend", "sendgrid", "mock")


def split_origins(value: str) -> List[str]:
    """CORS origins from a JSON array or a comma separated string."""
    value = value.strip()
    if not value:
        return list(DEFAULT_CORS_ORIGINS)
    if value.startswith("["):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Staff Contact Relay"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Key for staff identifiers; every form link changes with it
    HASH_SECRET: str

    # Generated module holding STAFF_BY_ID, see staff_relay.scripts.build_directory
    STAFF_DIRECTORY_MODULE: str = "staff_relay.data.staff"
    # When set, the directory is built from this JSON file at startup instead
    STAFF_SOURCE_FILE: str = ""

    EMAIL_PROVIDER: str = "resend"
    EMAIL_HTTP_TIMEOUT: float = 30.0
    RESEND_API_KEY: str = ""
    RESEND_FROM: str = ""
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""
    SENDGRID_FROM_NAME: str = "Staff Contact Relay"

    CORS_ORIGINS: Union[List[str], str] = DEFAULT_CORS_ORIGINS

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_SEND: str = "5/minute"
    # Only behind a proxy that overwrites X-Forwarded-For; clients can forge it
    TRUST_FORWARDED_FOR: bool = False

    # Largest accepted request body, in bytes
    MAX_REQUEST_SIZE: int = 64 * 1024

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return split_origins(v)
        return v

    @field_validator("EMAIL_PROVIDER", mode="before")
    @classmethod
    def normalize_email_provider(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def email_sender(self) -> str:
        """Verified sender address for the configured provider."""
        if self.EMAIL_PROVIDER == "sendgrid":
            return self.SENDGRID_FROM_EMAIL
        return self.RESEND_FROM

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def production_violations(self) -> List[str]:
        violations = []
        if self.DEBUG:
            violations.append("DEBUG=True is forbidden in production")
        if self.HASH_SECRET.lower() in INSECURE_SECRETS or len(self.HASH_SECRET) < MIN_SECRET_LENGTH:
            violations.append(
                f"HASH_SECRET must be at least {MIN_SECRET_LENGTH} characters and not a placeholder. "
                "Generate one: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        if self.EMAIL_PROVIDER == "mock":
            violations.append("EMAIL_PROVIDER=mock is forbidden in production")
        return violations

    def production_warnings(self) -> List[str]:
        warnings = []
        for origin in self.CORS_ORIGINS:
            if origin == "*":
                warnings.append("Wildcard '*' CORS origin")
            elif "localhost" in origin or "127.0.0.1" in origin:
                warnings.append(f"Localhost CORS origin '{origin}'")
        if not self.email_sender:
            # Every send fails with 500 until this is set
            warnings.append(f"No sender address configured for EMAIL_PROVIDER={self.EMAIL_PROVIDER}")
        return warnings

    @model_validator(mode="after")
    def validate_config(self):
        if self.EMAIL_PROVIDER not in EMAIL_PROVIDERS:
            raise ValueError(
                f"EMAIL_PROVIDER must be one of {', '.join(EMAIL_PROVIDERS)}, "
                f"got {self.EMAIL_PROVIDER!r}"
            )

        if self.is_production:
            for warning in self.production_warnings():
                logger.warning(f"Production config: {warning}")
            violations = self.production_violations()
            if violations:
                raise ValueError(
                    "Insecure production configuration:\n"
                    + "\n".join(f"  - {v}" for v in violations)
                )

        return self


def load_settings() -> Settings:
    """
    Build settings from the environment.

    When validation fails and ENVIRONMENT is unset or development, retry with
    development defaults so a fresh checkout starts without a .env.
    """
    try:
        return Settings()
    except ValueError:
        if os.getenv("ENVIRONMENT", "development") != "development":
            raise
        logger.warning(
            "Settings validation failed, using development defaults. "
            "Set HASH_SECRET in the .env file."
        )
        os.environ.setdefault("HASH_SECRET", "default-secret")
        os.environ.setdefault("ENVIRONMENT", "development")
        return Settings()


settings = load_settings()
