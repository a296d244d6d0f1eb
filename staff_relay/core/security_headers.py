"""
Security headers middleware

Three kinds of response leave the relay, each with its own policy:
- form pages: own-origin scripts and styles only, posting back to /api
- JSON from /api: nothing may render, and nothing is cached
- API docs (DEBUG only): Swagger/ReDoc assets from jsdelivr
"""
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

PAGE_POLICY = {
    "default-src": "'self'",
    "script-src": "'self'",
    "style-src": "'self'",
    "img-src": "'self' data:",
    "connect-src": "'self'",
    "form-action": "'self'",
    "frame-ancestors": "'none'",
    "base-uri": "'none'",
    "object-src": "'none'",
}

API_POLICY = {
    "default-src": "'none'",
    "frame-ancestors": "'none'",
}

DOCS_POLICY = {
    "default-src": "'self'",
    "script-src": "'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "style-src": "'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "img-src": "'self' data: https://fastapi.tiangolo.com",
    "frame-ancestors": "'none'",
    "object-src": "'none'",
}

DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")

PERMISSIONS_POLICY = ", ".join(
    f"{feature}=()" for feature in ("camera", "microphone", "geolocation", "payment", "usb")
)


def build_csp(directives: Dict[str, str]) -> str:
    return "; ".join(f"{key} {value}" for key, value in directives.items())


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    HSTS is only sent when `hsts` is set, which create_app() does for
    production without DEBUG.
    """

    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.hsts = hsts
        self._page_csp = build_csp(PAGE_POLICY)
        self._api_csp = build_csp(API_POLICY)
        self._docs_csp = build_csp(DOCS_POLICY)

    def _csp_for(self, path: str) -> str:
        if path in DOCS_PATHS:
            return self._docs_csp
        if path.startswith("/api/"):
            return self._api_csp
        return self._page_csp

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        path = request.url.path

        headers = response.headers
        headers["Content-Security-Policy"] = self._csp_for(path)
        headers["X-Content-Type-Options"] = "nosniff"
        headers["X-Frame-Options"] = "DENY"
        headers["Referrer-Policy"] = "no-referrer"
        headers["Permissions-Policy"] = PERMISSIONS_POLICY

        if path.startswith("/api/") or path.startswith("/form"):
            # Pages carry a staff id, API replies carry outcomes
            headers.setdefault("Cache-Control", "no-store")

        if self.hsts:
            headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
