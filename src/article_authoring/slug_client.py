"""
Remote slug uniqueness checking.

The backend exposes ``GET /api/check-slug?slug=...&siteId=...`` returning
``{"isUnique": bool, "slug": str}``. This module provides the checker
interface used by the validator and an httpx-based implementation.
"""

import logging
from typing import Optional, Protocol

import httpx

from .config import AuthoringConfig

logger = logging.getLogger(__name__)


class SlugCheckError(Exception):
    """Raised when the uniqueness check cannot produce an answer."""
    pass


class SlugChecker(Protocol):
    """Anything that can tell whether a slug is unused within a site."""

    async def is_unique(self, slug: str, site_id: str) -> bool:
        ...


class HttpSlugChecker:
    """
    Client for the remote uniqueness endpoint.

    Failures (network, timeout, non-2xx, unexpected body) raise
    SlugCheckError; the validator decides what that means for the user.
    """

    def __init__(
        self,
        config: Optional[AuthoringConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            config: Endpoint location and timeout.
            client: Optional preconfigured client (e.g. with a mock transport).
                When omitted, one is created and owned by this checker.
        """
        self.config = config or AuthoringConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.slug_check_timeout_seconds),
            follow_redirects=True,
        )

    @property
    def url(self) -> str:
        return self.config.check_slug_url

    async def is_unique(self, slug: str, site_id: str) -> bool:
        """
        Ask the backend whether ``slug`` is unused within ``site_id``.

        Raises:
            SlugCheckError: If the backend could not be reached or answered
                with an error.
        """
        try:
            response = await self._client.get(
                self.url,
                params={"slug": slug, "siteId": site_id},
            )
        except httpx.HTTPError as e:
            raise SlugCheckError(f"Slug check request failed: {e}") from e

        if response.status_code != 200:
            detail = _error_detail(response)
            raise SlugCheckError(
                f"Slug check returned HTTP {response.status_code}"
                + (f": {detail}" if detail else "")
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SlugCheckError(f"Slug check returned invalid JSON: {e}") from e

        is_unique = data.get("isUnique") if isinstance(data, dict) else None
        if not isinstance(is_unique, bool):
            raise SlugCheckError("Slug check response has no boolean 'isUnique'")

        logger.debug(f"Slug '{slug}' unique in site '{site_id}': {is_unique}")
        return is_unique

    async def aclose(self) -> None:
        """Close the underlying client if this checker created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpSlugChecker":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return ""
