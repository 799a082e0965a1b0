"""Avatar lookup for X/Twitter handles.

The avatar proxy is asked first with a HEAD probe. When it has never seen the
handle (404) the public profile page is fetched and its Open Graph image is
used instead, provided it points at a real uploaded avatar.
"""

import asyncio
import html
import re
from urllib.parse import quote, urlsplit, urlunsplit

import aiohttp

from src.api.core.constants import (
    AVATAR_PATH_MARKER,
    HIGH_RES_SIZE_TOKEN,
    LOW_RES_SIZE_TOKENS,
)
from src.api.core.exceptions.base import InvalidInputError, ProfileNotFoundError
from src.api.core.messages import MessageCode
from src.api.profile.schemas import AvatarResult
from src.utils.logger import get_logger
from src.utils.settings.avatar import avatar_settings

logger = get_logger(__name__)

# Attribute order varies between pages, so both layouts are matched
OG_IMAGE_PATTERNS = (
    re.compile(
        r'<meta\s+[^>]*?(?:property|name)=["\']og:image["\'][^>]*?content=["\']([^"\']+)["\']',
        re.IGNORECASE,
    ),
    re.compile(
        r'<meta\s+[^>]*?content=["\']([^"\']+)["\'][^>]*?(?:property|name)=["\']og:image["\']',
        re.IGNORECASE,
    ),
)

SIZE_TOKEN_PATTERN = re.compile(
    r"(?<=[/_])(" + "|".join(LOW_RES_SIZE_TOKENS) + r")(?=[./]|$)"
)


def normalize_handle(handle: str | None) -> str:
    """Trim whitespace and drop a leading "@"."""
    return (handle or "").strip().removeprefix("@").strip()


def extract_og_image(page: str) -> str | None:
    """Return the og:image URL of an HTML page, if it has one."""
    for pattern in OG_IMAGE_PATTERNS:
        match = pattern.search(page)
        if match:
            return html.unescape(match.group(1).strip()) or None
    return None


def is_avatar_image_url(url: str) -> bool:
    """Only uploaded avatars live under profile_images; anything else is placeholder art."""
    return url.startswith(("http://", "https://")) and f"/{AVATAR_PATH_MARKER}/" in url


def upscale_avatar_url(url: str) -> str:
    """Rewrite a low-resolution size token (e.g. _normal, /200x200/) to 400x400.

    Only the path is touched; host, query and fragment are kept as they are.
    """
    parts = urlsplit(url)
    path = SIZE_TOKEN_PATTERN.sub(HIGH_RES_SIZE_TOKEN, parts.path, count=1)
    return urlunsplit(parts._replace(path=path))


class AvatarResolver:
    """Resolve a handle to an avatar URL via the proxy, then the profile page."""

    def __init__(
        self,
        proxy_url: str | None = None,
        social_site_url: str | None = None,
        probe_timeout: float | None = None,
        profile_timeout: float | None = None,
    ):
        self.proxy_url = (proxy_url or avatar_settings.AVATAR_PROXY_URL).rstrip("/")
        self.social_site_url = (
            social_site_url or avatar_settings.SOCIAL_SITE_URL
        ).rstrip("/")
        self.probe_timeout = probe_timeout or avatar_settings.AVATAR_PROBE_TIMEOUT
        self.profile_timeout = (
            profile_timeout or avatar_settings.PROFILE_FETCH_TIMEOUT
        )

    def canonical_url(self, handle: str) -> str:
        return f"{self.proxy_url}/x/{quote(handle, safe='')}"

    async def resolve(self, handle: str) -> AvatarResult:
        """Resolve the avatar for a handle.

        Raises:
            InvalidInputError: the handle is empty
            ProfileNotFoundError: neither strategy produced a usable image
        """
        clean_handle = normalize_handle(handle)
        if not clean_handle:
            raise InvalidInputError(MessageCode.HANDLE_REQUIRED)

        canonical = self.canonical_url(clean_handle)
        try:
            status_code = await self._probe_avatar(canonical)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Avatar probe failed for {clean_handle}: {e}")
            raise ProfileNotFoundError(details={"handle": clean_handle})

        if 200 <= status_code < 300:
            return AvatarResult(handle=clean_handle, image_url=canonical)

        if status_code != 404:
            logger.warning(
                "Avatar proxy returned unexpected status",
                handle=clean_handle,
                status_code=status_code,
            )
            raise ProfileNotFoundError(details={"handle": clean_handle})

        image_url = await self._resolve_from_profile_page(clean_handle)
        return AvatarResult(handle=clean_handle, image_url=image_url)

    async def _resolve_from_profile_page(self, handle: str) -> str:
        try:
            page = await self._fetch_profile_page(handle)
        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            ValueError,  # undecodable body
            LookupError,  # unknown charset
        ) as e:
            logger.warning(f"Profile page fetch failed for {handle}: {e}")
            raise ProfileNotFoundError(details={"handle": handle})

        image_url = extract_og_image(page) if page else None
        if not image_url or not is_avatar_image_url(image_url):
            logger.info(
                "Profile page has no usable avatar",
                handle=handle,
                og_image=image_url,
            )
            raise ProfileNotFoundError(details={"handle": handle})

        return upscale_avatar_url(image_url)

    async def _probe_avatar(self, url: str) -> int:
        """HEAD the proxy URL with fallback art disabled; return the status code."""
        async with aiohttp.ClientSession() as session:
            async with session.head(
                url,
                params={"fallback": "false"},
                allow_redirects=True,
                timeout=aiohttp.ClientTimeout(total=self.probe_timeout),
            ) as response:
                return response.status

    async def _fetch_profile_page(self, handle: str) -> str | None:
        """GET the public profile page; None when it is not a 2xx."""
        url = f"{self.social_site_url}/{quote(handle, safe='')}"
        headers = {"User-Agent": avatar_settings.PROFILE_FETCH_USER_AGENT}
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.profile_timeout),
            ) as response:
                if response.status >= 400:
                    logger.info(
                        "Profile page unavailable",
                        handle=handle,
                        status_code=response.status,
                    )
                    return None
                return await response.text()


async def get_avatar_resolver() -> AvatarResolver:
    """Get avatar resolver for dependency injection."""
    return AvatarResolver()
