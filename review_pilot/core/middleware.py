"""Route guard middleware.

Classifies every request path as protected, admin or public and enforces
token presence and validity before any handler runs. Verified claims are
left on ``request.state.claims`` for the handler dependencies.
"""

import logging
from urllib.parse import quote

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, RedirectResponse

from ..models import UserRole
from .config import Settings
from .security import TokenPayload, verify_token

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = (
    "/dashboard",
    "/ai",
    "/subscription",
    "/platforms",
    "/import",
    "/reviews",
    "/billing/subscription",
)

PUBLIC_PREFIXES = (
    "/",
    "/login",
    "/signup",
    "/forgot-password",
    "/auth",
    "/health",
    "/seed",
    "/billing/webhook",
)

ADMIN_PREFIXES = ("/admin",)

# Page routes a signed-in browser is bounced away from
GUEST_ONLY_PATHS = ("/login", "/signup")

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"


def _matches(path: str, prefix: str) -> bool:
    if prefix == "/":
        return path == "/"
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str) -> str:
    """Return ``protected``, ``admin``, ``public`` or ``open`` (unlisted)."""
    if any(_matches(path, p) for p in PROTECTED_PREFIXES):
        return "protected"
    if any(_matches(path, p) for p in ADMIN_PREFIXES):
        return "admin"
    if any(_matches(path, p) for p in PUBLIC_PREFIXES):
        return "public"
    return "open"


def wants_html(request: Request) -> bool:
    """Browser page loads prefer text/html over JSON."""
    accept = request.headers.get("accept", "")
    return "text/html" in accept and "application/json" not in accept


def extract_token(request: Request, cookie_name: str) -> str | None:
    """Bearer header first, then the session cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(cookie_name) or None


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expires_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """
    Allow/deny route matcher in front of every handler.

    - protected or admin path without a token: 401 or redirect to login
    - invalid or expired token: 401 or redirect to login, cookie cleared
    - admin path with a non-admin role: 403 or redirect to the dashboard
    - signed-in browser on login/signup: redirect to the dashboard
    """

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        kind = classify_path(path)
        html = wants_html(request)
        token = extract_token(request, self.settings.auth_cookie_name)

        claims: TokenPayload | None = verify_token(token, settings=self.settings) if token else None

        if kind in ("protected", "admin"):
            if not token:
                return self._deny_login(request, "Authentication required", html)
            if claims is None:
                logger.info(f"Rejected invalid or expired token on {path}")
                response = self._deny_login(request, "Invalid or expired token", html)
                clear_auth_cookie(response, self.settings)
                return response
            if kind == "admin" and claims.role != UserRole.ADMIN:
                logger.warning(f"User {claims.user_id} denied admin path {path}")
                if html:
                    return RedirectResponse(HOME_PATH, status_code=307)
                return JSONResponse(status_code=403, content={"error": "Admin access required"})

        if claims is not None:
            if html and path in GUEST_ONLY_PATHS:
                return RedirectResponse(HOME_PATH, status_code=307)
            request.state.claims = claims

        return await call_next(request)

    @staticmethod
    def _deny_login(request: Request, message: str, html: bool) -> Response:
        if html:
            target = f"{LOGIN_PATH}?redirect={quote(request.url.path, safe='/')}"
            return RedirectResponse(target, status_code=307)
        return JSONResponse(
            status_code=401,
            content={"error": message},
            headers={"WWW-Authenticate": "Bearer"},
        )
