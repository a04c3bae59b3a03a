"""Domain models for the field inspector."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    """Represents a user held by a credential store."""

    id: str | int
    email: str
    display_name: str | None
    created_at: datetime


@dataclass(frozen=True)
class SessionToken:
    """Opaque bearer token issued on register or login."""

    token: str
    user_id: str | int


@dataclass(frozen=True)
class AuthResult:
    """User and freshly minted session."""

    user: UserRecord
    session: SessionToken | None
