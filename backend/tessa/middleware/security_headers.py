"""
Tessa Backend — Security Headers Middleware
=============================================

Adds browser hardening headers to every response, the same set the helmet
defaults give an Express app.

Production:
    Content-Security-Policy    self-only, inline styles, https/data images
    Strict-Transport-Security  one year, include subdomains
    + the always-on headers below
Development (ENVIRONMENT=development):
    No CSP and no HSTS, so local tooling over plain http keeps working

Always on: X-Content-Type-Options, X-Frame-Options, Referrer-Policy,
Cross-Origin-Opener-Policy, X-DNS-Prefetch-Control,
X-Permitted-Cross-Domain-Policies, X-XSS-Protection.

The interactive docs pages load Swagger/ReDoc assets from a CDN, so CSP is
not applied to them.
"""

from typing import Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tessa.config import settings

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self'",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data: https:",
        "connect-src 'self'",
        "font-src 'self'",
        "object-src 'none'",
        "frame-ancestors 'self'",
        "base-uri 'self'",
        "upgrade-insecure-requests",
    ]
)
STRICT_TRANSPORT_SECURITY = "max-age=31536000; includeSubDomains"

BASE_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

DOCS_PATHS = {"/docs", "/docs/oauth2-redirect", "/redoc"}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, development: Optional[bool] = None):
        super().__init__(app)
        self.development = settings.is_development if development is None else development

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        for name, value in BASE_HEADERS.items():
            response.headers.setdefault(name, value)

        if not self.development:
            response.headers.setdefault("Strict-Transport-Security", STRICT_TRANSPORT_SECURITY)
            if request.url.path not in DOCS_PATHS:
                response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)

        return response
