"""Service factory for centralized dependency injection.

The factory owns the two network clients and hands them to the resolver and
extractor it creates, so every pipeline run shares one connection pool per
service.

Example:
    >>> from recipe_extract.config import PipelineConfig
    >>> async with ServiceFactory(PipelineConfig.load()) as factory:
    ...     recipe = await factory.create_assembler().assemble(url)
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

import httpx
from openai import AsyncOpenAI, OpenAIError

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..config import PipelineConfig
    from ..extractor import StructuredExtractor
    from ..pipeline import RecipeAssembler
    from ..resolver import MetadataResolver


@dataclass
class ServiceFactory:
    """Factory for creating service instances with shared dependencies.

    Both clients are created lazily and cached. Client timeouts come from the
    configuration. The OpenAI client is built with ``max_retries=0`` because
    the pipeline performs no retries of its own.

    Attributes:
        config: Pipeline configuration for all services
    """

    config: PipelineConfig

    @cached_property
    def http_client(self) -> httpx.AsyncClient:
        """Get the shared async HTTP client for the metadata service."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.fetch_timeout),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    @cached_property
    def openai_client(self) -> AsyncOpenAI:
        """Get the shared async OpenAI client.

        Raises:
            ConfigurationError: If the client cannot be built, e.g. when
                OPENAI_API_KEY is not set
        """
        try:
            return AsyncOpenAI(timeout=self.config.extraction_timeout, max_retries=0)
        except OpenAIError as e:
            raise ConfigurationError("OpenAI client could not be configured", error=str(e)) from e

    def create_resolver(self) -> MetadataResolver:
        """Create a metadata resolver bound to the shared HTTP client."""
        from ..resolver import MetadataResolver

        return MetadataResolver(
            client=self.http_client,
            endpoint=self.config.metadata_endpoint,
            max_content_chars=self.config.max_content_chars,
        )

    def create_extractor(self) -> StructuredExtractor:
        """Create a structured extractor bound to the shared OpenAI client."""
        from ..extractor import StructuredExtractor

        return StructuredExtractor(
            client=self.openai_client,
            model=self.config.model,
            temperature=self.config.temperature,
        )

    def create_assembler(self) -> RecipeAssembler:
        """Create a recipe assembler wired to a resolver and extractor."""
        from ..pipeline import RecipeAssembler

        return RecipeAssembler(
            resolver=self.create_resolver(),
            extractor=self.create_extractor(),
        )

    async def aclose(self) -> None:
        """Close any clients that were created."""
        if "http_client" in self.__dict__:
            await self.http_client.aclose()
        if "openai_client" in self.__dict__:
            await self.openai_client.close()

    async def __aenter__(self) -> ServiceFactory:
        """Enter the factory context; clients are still created lazily."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close created clients on context exit."""
        await self.aclose()
