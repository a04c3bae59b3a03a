"""In-process credential store used when no identity backend is configured."""

import hashlib
import hmac
import secrets
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime

from field_inspector.domain.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from field_inspector.domain.models import AuthResult, SessionToken, UserRecord
from field_inspector.services.auth import (
    CredentialStore,
    decode_local_token,
    encode_local_token,
)


@dataclass(frozen=True)
class _Account:
    user: UserRecord
    salt: bytes
    password_hash: bytes


PBKDF2_ITERATIONS = 200_000


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS
    )


@dataclass
class InMemoryCredentialStore(CredentialStore):
    """Credential store backed by a process-local map keyed by integer id."""

    _accounts: dict[int, _Account] = field(default_factory=dict)
    _next_id: int = 1
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def register(
        self, email: str, password: str, display_name: str | None
    ) -> AuthResult:
        """Create a user with the next integer id and mint a local token."""
        normalized = _normalize_email(email)
        salt = secrets.token_bytes(16)
        password_hash = _hash_password(password, salt)
        with self._lock:
            if self._find(normalized) is not None:
                raise DuplicateUserError(normalized)
            user = UserRecord(
                id=self._next_id,
                email=normalized,
                display_name=display_name,
                created_at=datetime.now(tz=UTC),
            )
            self._accounts[user.id] = _Account(
                user=user, salt=salt, password_hash=password_hash
            )
            self._next_id += 1
        return AuthResult(user=user, session=_mint(user))

    def login(self, email: str, password: str) -> AuthResult:
        """Scan accounts for a matching email and password."""
        account = self._find(_normalize_email(email))
        if account is None or not hmac.compare_digest(
            account.password_hash, _hash_password(password, account.salt)
        ):
            raise InvalidCredentialsError()
        return AuthResult(user=account.user, session=_mint(account.user))

    def verify(self, token: str) -> UserRecord:
        """Decode the embedded user id and look it up."""
        account = self._accounts.get(decode_local_token(token))
        if account is None:
            raise InvalidTokenError()
        return account.user

    def close(self) -> None:
        with self._lock:
            self._accounts.clear()

    def _find(self, email: str) -> _Account | None:
        for account in self._accounts.values():
            if account.user.email == email:
                return account
        return None


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _mint(user: UserRecord) -> SessionToken:
    return SessionToken(token=encode_local_token(int(user.id)), user_id=user.id)
