"""Metadata resolution: turn a recipe URL into page metadata and raw text.

A single GET is made to the metadata-fetch service. There are no retries at
this layer; whether to retry is the caller's decision.
"""

from __future__ import annotations

import logging
from typing import Final
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from .content import clean_content
from .exceptions import FetchError, NoContentError
from .models import MicrolinkResponse, ScrapedMetadata

logger = logging.getLogger(__name__)


def derive_source(url: str) -> str:
    """Derive the display source for a recipe URL.

    The hostname is returned unchanged except for a leading ``www.``.

    Examples:
        >>> derive_source("https://www.example.com/recipe/1")
        'example.com'
        >>> derive_source("https://example.com/x")
        'example.com'

    Raises:
        FetchError: If the URL is not an absolute http(s) URL
    """
    parsed = urlparse(url)
    hostname = parsed.hostname
    if parsed.scheme not in ("http", "https") or not hostname:
        raise FetchError("Not an absolute http(s) URL", url=url)
    return hostname.removeprefix("www.")


class MetadataResolver:
    """Resolves page metadata through a Microlink-compatible fetch service.

    Attributes:
        client: Shared async HTTP client
        endpoint: Base URL of the metadata service
        max_content_chars: Cap on the cleaned content snapshot
    """

    DEFAULT_ENDPOINT: Final[str] = "https://api.microlink.io/"
    DEFAULT_MAX_CONTENT_CHARS: Final[int] = 40000

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: str = DEFAULT_ENDPOINT,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
    ) -> None:
        self.client = client
        self.endpoint = endpoint
        self.max_content_chars = max_content_chars

    async def resolve(self, url: str) -> ScrapedMetadata:
        """Fetch metadata for a URL.

        Args:
            url: Absolute http(s) URL of the recipe page

        Returns:
            ScrapedMetadata with title, image, description, source and content

        Raises:
            FetchError: If the URL is invalid or the service call fails
            NoContentError: If the service returns neither content nor description
        """
        source = derive_source(url)
        logger.info(f"Resolving metadata for {url}")

        payload = await self._fetch(url)
        data = payload.data

        if not data.content and not data.description:
            logger.error(f"No content found in metadata for {url}")
            raise NoContentError("No recipe content found", url=url)

        raw_content = clean_content(data.content, self.max_content_chars)
        if not raw_content:
            raw_content = clean_content(data.description, self.max_content_chars)

        logger.debug(
            f"Resolved {url}: title={data.title!r}, content_length={len(raw_content)}"
        )
        return ScrapedMetadata(
            title=data.title,
            image_url=data.image_url,
            description=data.description,
            source=source,
            raw_content=raw_content,
        )

    async def _fetch(self, url: str) -> MicrolinkResponse:
        """Call the metadata service and validate its envelope."""
        try:
            response = await self.client.get(
                self.endpoint,
                params={"url": url, "data.content": "true"},
            )
        except httpx.TimeoutException as e:
            raise FetchError("Metadata service timed out", url=url) from e
        except httpx.HTTPError as e:
            raise FetchError("Metadata service request failed", url=url, error=str(e)) from e

        if not response.is_success:
            logger.error(f"Metadata service returned {response.status_code} for {url}")
            raise FetchError(
                "Metadata service returned an error",
                url=url,
                status_code=response.status_code,
            )

        try:
            return MicrolinkResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise FetchError(
                "Malformed metadata response",
                url=url,
                errors=e.error_count(),
            ) from e
