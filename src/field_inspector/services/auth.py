"""Registration, login and bearer token verification."""

import re
import secrets
from dataclasses import dataclass
from typing import Protocol

from field_inspector.domain.errors import InvalidTokenError, MissingTokenError
from field_inspector.domain.models import AuthResult, UserRecord

LOCAL_TOKEN_PREFIX = "local-session"
_LOCAL_TOKEN_PATTERN = re.compile(
    rf"^{re.escape(LOCAL_TOKEN_PREFIX)}\.(\d+)\.[0-9a-f]+$"
)


class CredentialStore(Protocol):
    """Interface for a user identity backend."""

    def register(
        self, email: str, password: str, display_name: str | None
    ) -> AuthResult:
        """Create a user and mint a session."""

    def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and mint a session."""

    def verify(self, token: str) -> UserRecord:
        """Return the user a token was issued to."""


def encode_local_token(user_id: int) -> str:
    """Build a self-describing token for the in-memory credential store."""
    return f"{LOCAL_TOKEN_PREFIX}.{user_id}.{secrets.token_hex(8)}"


def is_local_token(token: str) -> bool:
    return token.startswith(f"{LOCAL_TOKEN_PREFIX}.")


def decode_local_token(token: str) -> int:
    """Return the user id embedded in a local token."""
    match = _LOCAL_TOKEN_PATTERN.match(token)
    if not match:
        raise InvalidTokenError()
    return int(match.group(1))


def extract_bearer_token(authorization: str | None) -> str:
    """Pull the token out of an Authorization header value."""
    if not authorization:
        raise MissingTokenError()
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise MissingTokenError()
    token = token.strip()
    if not token:
        raise MissingTokenError()
    return token


@dataclass
class AuthService:
    """Routes identity calls to the configured credential store.

    Registration and login go to the store selected at startup. Verification
    inspects the token: local-encoded tokens are checked against the
    in-memory store, anything else is forwarded to the external store.
    """

    local_store: CredentialStore
    external_store: CredentialStore | None = None

    @property
    def active_store(self) -> CredentialStore:
        return self.external_store or self.local_store

    @property
    def external(self) -> bool:
        return self.external_store is not None

    def register(
        self, email: str, password: str, display_name: str | None
    ) -> AuthResult:
        """Register a user in the active store."""
        return self.active_store.register(email, password, display_name)

    def login(self, email: str, password: str) -> AuthResult:
        """Log a user in against the active store."""
        return self.active_store.login(email, password)

    def verify(self, token: str | None) -> UserRecord:
        """Resolve a bearer token to its user."""
        if not token:
            raise MissingTokenError()
        if is_local_token(token):
            return self.local_store.verify(token)
        if self.external_store is None:
            raise InvalidTokenError()
        return self.external_store.verify(token)

    def verify_header(self, authorization: str | None) -> UserRecord:
        """Resolve an Authorization header to its user."""
        return self.verify(extract_bearer_token(authorization))
