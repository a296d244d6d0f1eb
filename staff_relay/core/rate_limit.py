"""
Rate limiting for the public send endpoint

SlowAPI with its default in-memory storage, so each worker process counts on
its own. The limit is checked before the request body is read; callers are
keyed on IP alone.
"""
import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from staff_relay.core.config import settings

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests. Please try again later."


def get_client_ip(request: Request) -> str:
    """
    Address the limit is counted against.

    With TRUST_FORWARDED_FOR the left-most X-Forwarded-For entry is the
    visitor; otherwise the header is ignored and the peer address is used.
    """
    if settings.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("X-Forwarded-For", "")
        client_ip = forwarded.split(",")[0].strip()
        if client_ip:
            return client_ip
    return get_remote_address(request)


limiter = Limiter(key_func=get_client_ip, enabled=settings.RATE_LIMIT_ENABLED)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the relay's `{ok, error}` shape; Retry-After is the limit window."""
    retry_after = exc.limit.limit.get_expiry()
    logger.warning(f"Rate limit exceeded: {get_client_ip(request)} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={"ok": False, "error": TOO_MANY_REQUESTS},
        headers={"Retry-After": str(retry_after)},
    )


def get_send_limit():
    """Decorator applying RATE_LIMIT_SEND to the send endpoint."""
    return limiter.limit(settings.RATE_LIMIT_SEND)
