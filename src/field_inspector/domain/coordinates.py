"""Validation model for GPS coordinates."""

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """Latitude/longitude pair; extra backend-specific keys are kept."""

    model_config = ConfigDict(extra="allow")

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
