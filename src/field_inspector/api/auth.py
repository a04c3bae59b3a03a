"""Authentication endpoints and the bearer token dependency."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request

from field_inspector.api.schemas import LoginRequest, RegisterRequest  # noqa: TC001
from field_inspector.domain.models import AuthResult, UserRecord

if TYPE_CHECKING:
    from field_inspector.containers import AppContainer

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def require_user(
    request: Request, authorization: str | None = Header(default=None)
) -> UserRecord:
    """Resolve the request's bearer token to a user."""
    container: AppContainer = request.app.state.container
    return container.auth_service.verify_header(authorization)


@router.post("/register")
async def register(body: RegisterRequest, request: Request) -> dict[str, object]:
    """Register a user and return the first session."""
    container: AppContainer = request.app.state.container
    result = container.auth_service.register(body.email, body.password, body.full_name)
    return {
        "success": True,
        "message": "User registered",
        **_auth_payload(result),
    }


@router.post("/login")
async def login(body: LoginRequest, request: Request) -> dict[str, object]:
    """Log a user in and return a new session."""
    container: AppContainer = request.app.state.container
    result = container.auth_service.login(body.email, body.password)
    return {"success": True, "message": "Login successful", **_auth_payload(result)}


@router.get("/me")
async def me(user: UserRecord = Depends(require_user)) -> dict[str, object]:
    """Return the user behind the bearer token."""
    return {"success": True, "user": user_payload(user)}


def user_payload(user: UserRecord) -> dict[str, object]:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "created_at": user.created_at.isoformat(),
    }


def _auth_payload(result: AuthResult) -> dict[str, object]:
    session = None
    if result.session is not None:
        session = {"token": result.session.token, "user_id": result.session.user_id}
    return {"user": user_payload(result.user), "session": session}
