"""
Staff Contact Relay
FastAPI application entry point

- Rate limiting on the send endpoint with SlowAPI
- Error sanitization middleware (no stack traces or addresses in responses)
- Security headers (CSP, X-Frame-Options, etc.)
- Request size limit
- HTTP client lifecycle management for the email provider
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from staff_relay import __version__
from staff_relay.api.routes import forms, send
from staff_relay.core.config import Settings, settings
from staff_relay.core.error_handler import ErrorSanitizationMiddleware, dispatch_error_handler
from staff_relay.core.exceptions import DispatchError
from staff_relay.core.rate_limit import limiter, rate_limit_exceeded_handler
from staff_relay.core.security_headers import SecurityHeadersMiddleware
from staff_relay.services.directory import StaffDirectory, load_directory
from staff_relay.services.dispatcher import Dispatcher
from staff_relay.services.email_provider import EmailProvider, get_email_provider

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Request lines from the provider clients carry no useful context
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests that exceed the size limit."""

    def __init__(self, app, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={"ok": False, "error": "Invalid request data"},
                )
            if size > self.max_size:
                logger.warning(
                    f"Request size limit exceeded: {size} bytes on {request.url.path}"
                )
                return JSONResponse(
                    status_code=413,
                    content={
                        "ok": False,
                        "error": f"Request body exceeds maximum size of {self.max_size // 1024}KB",
                    },
                )
        return await call_next(request)


def create_app(
    directory: Optional[StaffDirectory] = None,
    provider: Optional[EmailProvider] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the relay application.

    The directory and provider are loaded from settings unless given. Both
    are fixed for the lifetime of the app and shared by every request.
    """
    app_settings = app_settings or settings
    if directory is None:
        directory = load_directory(app_settings)
    if provider is None:
        provider = get_email_provider(app_settings)

    dispatcher = Dispatcher(directory, provider, app_settings.email_sender)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"{app_settings.APP_NAME} starting: environment={app_settings.ENVIRONMENT}, "
            f"provider={provider.name}, staff_entries={len(directory)}"
        )
        yield
        # Close HTTP clients to prevent connection leaks
        await provider.close()
        logger.info(f"Email provider {provider.name} closed")

    app = FastAPI(
        lifespan=lifespan,
        title=app_settings.APP_NAME,
        description="""
## Staff Contact Relay

Public contact form that forwards a visitor's message to a staff member.
Staff are addressed by an opaque identifier; their email addresses never
leave the server.

### Rate Limits
- Send endpoint: 5 requests/minute per client IP (configurable)
        """,
        version=__version__,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
        openapi_tags=[
            {"name": "Health", "description": "Health check"},
            {"name": "Contact", "description": "Contact message relay"},
            {"name": "Forms", "description": "Contact form pages"},
        ],
    )

    app.state.directory = directory
    app.state.dispatcher = dispatcher
    app.state.settings = app_settings

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(DispatchError, dispatch_error_handler)

    app.add_middleware(RequestSizeLimitMiddleware, max_size=app_settings.MAX_REQUEST_SIZE)

    # Error sanitization (catches unhandled exceptions)
    app.add_middleware(ErrorSanitizationMiddleware, debug=app_settings.DEBUG)

    # Security headers (CSP, X-Frame-Options, etc.)
    app.add_middleware(
        SecurityHeadersMiddleware,
        hsts=app_settings.ENVIRONMENT == "production" and not app_settings.DEBUG,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(send.router, prefix="/api", tags=["Contact"])
    app.include_router(forms.router, tags=["Forms"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "service": app_settings.APP_NAME,
            "email_provider": provider.name,
        }

    return app


configure_logging(settings.LOG_LEVEL)
app = create_app()
