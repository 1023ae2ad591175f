from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"


class Location(BaseModel):
    lat: float = Field(
        0.0, ge=-90.0, le=90.0, allow_inf_nan=False, description="Latitude in degrees"
    )
    lon: float = Field(
        0.0, ge=-180.0, le=180.0, allow_inf_nan=False, description="Longitude in degrees"
    )


class Post(BaseModel):
    """A geo-tagged post as stored in, and returned from, the post index."""

    model_config = ConfigDict(use_enum_values=True)

    user: str = Field("", description="Username of the authenticated submitter")
    message: str = Field("", description="Free-text message")
    location: Location = Field(default_factory=Location)
    url: str = Field(
        "", description="Public media link; empty when no media was attached"
    )
    type: MediaKind | Literal[""] = Field(
        "", description="Media kind (image, video, unknown) or empty without media"
    )
    face: float = Field(
        0.0, ge=0.0, le=1.0, description="Face detection confidence for images"
    )
