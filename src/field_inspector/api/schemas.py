"""Request bodies for the JSON endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration payload."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    full_name: str | None = Field(default=None, alias="fullName")


class LoginRequest(BaseModel):
    """Login payload."""

    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class RecordUpdateRequest(BaseModel):
    """Fields a client may change on an existing record."""

    location: str | None = None
    notes: str | None = None
