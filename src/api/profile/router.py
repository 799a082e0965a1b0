from fastapi import APIRouter, Query

from src.api.core.dependencies import AvatarResolverDep
from src.api.core.exceptions.base import InvalidInputError
from src.api.profile.schemas import TwitterProfileResponse

router = APIRouter(prefix="/api", tags=["profile"])


@router.get("/twitter-profile", response_model=TwitterProfileResponse)
async def get_twitter_profile(
    resolver: AvatarResolverDep,
    username: str | None = Query(default=None),
) -> TwitterProfileResponse:
    """Resolve the avatar URL for a handle (leading "@" allowed)."""
    if not username or not username.strip():
        raise InvalidInputError(message="Username is required")

    avatar = await resolver.resolve(username)
    return TwitterProfileResponse(profile_image_url=avatar.image_url)
