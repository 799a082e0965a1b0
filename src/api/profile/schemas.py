"""Profile lookup API schemas."""

from pydantic import BaseModel, ConfigDict


class AvatarResult(BaseModel):
    """A resolved avatar image for a handle."""

    model_config = ConfigDict(frozen=True)

    handle: str
    image_url: str


class TwitterProfileResponse(BaseModel):
    profile_image_url: str
