"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from offer_catalog.api.admin import router as admin_router
from offer_catalog.api.auth import router as auth_router
from offer_catalog.api.gate import SessionGateMiddleware
from offer_catalog.api.pages import router as pages_router
from offer_catalog.api.public import router as public_router
from offer_catalog.app_logging import configure_logging
from offer_catalog.containers import AppContainer
from offer_catalog.domain.errors import (
    AuthenticationRequired,
    OfferNotFoundError,
    OfferValidationError,
    UpstreamFailure,
)
from offer_catalog.domain.offers import MISSING_FIELDS_MESSAGE

_VALUE_ERROR_PREFIX = "Value error, "


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(SessionGateMiddleware, token_service=container.token_service)

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(public_router)
    app.include_router(pages_router)

    @app.exception_handler(OfferValidationError)
    async def validation_error(_: Request, exc: OfferValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, _describe_request_errors(exc.errors()))

    @app.exception_handler(OfferNotFoundError)
    async def not_found(_: Request, exc: OfferNotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(AuthenticationRequired)
    async def unauthenticated(_: Request, exc: AuthenticationRequired) -> JSONResponse:
        return _error(401, str(exc))

    @app.exception_handler(UpstreamFailure)
    async def upstream_failure(request: Request, exc: UpstreamFailure) -> JSONResponse:
        logger.error(
            "Upstream failure on %s %s: %s", request.method, request.url.path, exc
        )
        return _error(500, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            {"error": exc.detail},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _describe_request_errors(errors: list[dict]) -> str:
    """Collapse pydantic errors into a single user-facing message."""
    if not errors or any(_is_missing(error) for error in errors):
        return MISSING_FIELDS_MESSAGE
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid request body"
    message = str(first.get("msg", ""))
    if first.get("type") == "value_error" and message.startswith(_VALUE_ERROR_PREFIX):
        return message[len(_VALUE_ERROR_PREFIX) :]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid value for {field}" if field else "Invalid request body"


def _is_missing(error: dict) -> bool:
    # An explicit null on a required field fails type checks with input None.
    if error.get("type") == "missing":
        return True
    nested = len(error.get("loc", ())) > 1
    return nested and "input" in error and error["input"] is None
