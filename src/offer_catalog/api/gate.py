"""Session gate in front of privileged pages and API routes."""

from enum import Enum

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.types import ASGIApp

from offer_catalog.domain.admins import AdministratorIdentity
from offer_catalog.domain.errors import AuthenticationRequired
from offer_catalog.services.tokens import TokenService

SESSION_COOKIE_NAME = "auth-token"
LOGIN_PATH = "/login"


class RouteClass(Enum):
    """How a protected path reacts to a missing session."""

    PAGE = "page"
    API = "api"


_PROTECTED_PREFIXES = (
    ("/api/admin", RouteClass.API),
    ("/admin", RouteClass.PAGE),
)


def classify_path(path: str) -> RouteClass | None:
    """Return the route class for a protected path, or None if public."""
    for prefix, route_class in _PROTECTED_PREFIXES:
        if path == prefix or path.startswith(f"{prefix}/"):
            return route_class
    return None


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Admits protected requests only with a valid session cookie.

    Pages are redirected to the login page and API calls get a bare 401, both
    before any handler runs. Admitted requests carry the verified identity on
    ``request.state.admin``.
    """

    def __init__(
        self,
        app: ASGIApp,
        token_service: TokenService,
        cookie_name: str = SESSION_COOKIE_NAME,
        login_path: str = LOGIN_PATH,
    ) -> None:
        super().__init__(app)
        self.token_service = token_service
        self.cookie_name = cookie_name
        self.login_path = login_path

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        route_class = classify_path(request.url.path)
        if route_class is None:
            return await call_next(request)

        identity = self.token_service.verify(request.cookies.get(self.cookie_name))
        if identity is None:
            if route_class is RouteClass.API:
                return JSONResponse(
                    {"error": "Authentication required"}, status_code=401
                )
            return RedirectResponse(self.login_path, status_code=307)

        request.state.admin = identity
        return await call_next(request)


def require_admin(request: Request) -> AdministratorIdentity:
    """Return the identity admitted by the session gate."""
    identity = getattr(request.state, "admin", None)
    if not isinstance(identity, AdministratorIdentity):
        raise AuthenticationRequired()
    return identity
