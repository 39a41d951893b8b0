"""Login, logout and current-session endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, Response, status

from offer_catalog.api.gate import SESSION_COOKIE_NAME
from offer_catalog.api.models import LoginRequest, serialize_admin
from offer_catalog.domain.errors import AuthenticationRequired

if TYPE_CHECKING:
    from offer_catalog.containers import AppContainer

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    payload: LoginRequest, request: Request, response: Response
) -> dict[str, object]:
    """Check credentials and start a cookie session."""
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )
    container: AppContainer = request.app.state.container
    identity = await container.credential_service.authenticate(
        payload.email, payload.password
    )
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    settings = container.settings
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=container.token_service.issue(identity),
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        max_age=int(container.token_service.ttl.total_seconds()),
        path="/",
    )
    return {"success": True, "admin": serialize_admin(identity)}


@router.get("/me")
async def me(request: Request) -> dict[str, object]:
    """Return the administrator behind the session cookie."""
    container: AppContainer = request.app.state.container
    identity = container.token_service.verify(request.cookies.get(SESSION_COOKIE_NAME))
    if identity is None:
        raise AuthenticationRequired()
    return {"admin": serialize_admin(identity)}


@router.post("/logout")
async def logout(request: Request, response: Response) -> dict[str, object]:
    """Clear the session cookie."""
    container: AppContainer = request.app.state.container
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=container.settings.secure_cookies,
    )
    return {"success": True}
