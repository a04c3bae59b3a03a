"""Supabase Auth-backed credential store."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from field_inspector.domain.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    RegistrationError,
)
from field_inspector.domain.models import AuthResult, SessionToken, UserRecord
from field_inspector.services.auth import CredentialStore

logger = logging.getLogger(__name__)

# Sign-up rejections Supabase phrases for end users.
_USER_FACING_SIGNUP_ERRORS = (
    "password should",
    "weak password",
    "invalid email",
    "unable to validate email",
)


@dataclass
class SupabaseCredentialStore(CredentialStore):
    """Delegates identity and session minting to Supabase Auth."""

    client: Client

    def register(
        self, email: str, password: str, display_name: str | None
    ) -> AuthResult:
        """Sign a user up, storing the display name as user metadata."""
        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"full_name": display_name}},
                }
            )
        except Exception as exc:
            message = str(exc)
            lowered = message.lower()
            if "already registered" in lowered:
                raise DuplicateUserError(email) from exc
            if any(hint in lowered for hint in _USER_FACING_SIGNUP_ERRORS):
                raise RegistrationError(message) from exc
            logger.exception("Supabase sign-up failed", extra={"email": email})
            raise RegistrationError("Registration failed") from exc
        if response.user is None:
            raise RegistrationError("Registration did not return a user")
        user = _to_user(response.user)
        return AuthResult(user=user, session=_to_session(response.session, user))

    def login(self, email: str, password: str) -> AuthResult:
        """Sign a user in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            raise InvalidCredentialsError() from exc
        if response.user is None or response.session is None:
            raise InvalidCredentialsError()
        user = _to_user(response.user)
        return AuthResult(user=user, session=_to_session(response.session, user))

    def verify(self, token: str) -> UserRecord:
        """Ask Supabase which user a JWT belongs to."""
        try:
            response = self.client.auth.get_user(token)
        except Exception as exc:
            raise InvalidTokenError() from exc
        if response is None or response.user is None:
            raise InvalidTokenError()
        return _to_user(response.user)


def _to_user(user: object) -> UserRecord:
    metadata = getattr(user, "user_metadata", None) or {}
    created_at = getattr(user, "created_at", None)
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    return UserRecord(
        id=str(getattr(user, "id")),
        email=str(getattr(user, "email", "") or ""),
        display_name=metadata.get("full_name"),
        created_at=created_at or datetime.now(tz=UTC),
    )


def _to_session(session: object | None, user: UserRecord) -> SessionToken | None:
    if session is None:
        return None
    return SessionToken(token=str(getattr(session, "access_token")), user_id=user.id)
