"""
Error handling and sanitization

Nothing that leaves the relay, as a response or as a log line, may carry a
staff address, a submitter's address or provider credentials:
- provider error text is sanitized before it is logged
- dispatch failures map to a fixed public message per error class
- anything unhandled becomes a generic 500 with an error id to grep for
"""
import logging
import re
import traceback
import uuid
from typing import Union

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from staff_relay.core.exceptions import DispatchError

logger = logging.getLogger(__name__)

# Substrings that mark a provider message as unsafe to log verbatim
SENSITIVE_PATTERNS = (
    "api key",
    "apikey",
    "api_key",
    "authorization",
    "bearer",
    "credential",
    "password",
    "secret",
    "token",
)

EMAIL_ADDRESS_PATTERN = re.compile(r"[^\s@<>\"'(),;:]+@[^\s@<>\"'(),;:]+")

MAX_LOGGED_LENGTH = 200


def is_sensitive_error(message: str) -> bool:
    lowered = message.lower()
    return any(pattern in lowered for pattern in SENSITIVE_PATTERNS)


def redact_addresses(message: str) -> str:
    """Replace anything shaped like an email address."""
    return EMAIL_ADDRESS_PATTERN.sub("[redacted]", message)


def sanitize_error_message(error: Union[str, Exception, None]) -> str:
    """
    Make a provider error safe to log.

    Addresses are redacted, messages mentioning credentials are replaced
    outright and the rest is capped at MAX_LOGGED_LENGTH characters.
    """
    if error is None:
        return "unknown error"

    message = redact_addresses(str(error))
    if is_sensitive_error(message):
        return "An internal error occurred."
    if len(message) > MAX_LOGGED_LENGTH:
        return message[:MAX_LOGGED_LENGTH] + "..."
    return message


async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    """Map dispatch failures to the relay's `{ok, error}` JSON shape."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Last stop for exceptions nothing else handled.

    The client gets `{ok: false, error, error_id}`; the exception type is
    added only with `debug`. The log line has the type and the traceback
    with addresses redacted.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            error_id = uuid.uuid4().hex[:12]
            logger.error(
                f"Unhandled exception [{error_id}] {request.method} {request.url.path}: "
                f"{type(e).__name__}\n{redact_addresses(traceback.format_exc())}"
            )

            content = {
                "ok": False,
                "error": "Internal server error",
                "error_id": error_id,
            }
            if self.debug:
                content["type"] = type(e).__name__
            return JSONResponse(status_code=500, content=content)
