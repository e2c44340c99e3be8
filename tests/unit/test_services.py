"""Unit tests for recipe_extract.services package.

Tests ServiceFactory, dependency injection and client lifecycle.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from recipe_extract.config import PipelineConfig
from recipe_extract.exceptions import ConfigurationError
from recipe_extract.services import ServiceFactory


class TestServiceFactoryInit:
    """Tests for ServiceFactory initialization."""

    def test_init_with_config(self) -> None:
        """ServiceFactory stores config."""
        config = PipelineConfig()
        factory = ServiceFactory(config=config)
        assert factory.config is config


class TestServiceFactoryClients:
    """Tests for the shared client properties."""

    @patch("recipe_extract.services.factory.AsyncOpenAI")
    def test_openai_client_configured(self, mock_openai: MagicMock) -> None:
        """The OpenAI client gets the extraction timeout and no retries."""
        factory = ServiceFactory(config=PipelineConfig(extraction_timeout=12.0))

        client = factory.openai_client

        mock_openai.assert_called_once_with(timeout=12.0, max_retries=0)
        assert client is mock_openai.return_value

    @patch("recipe_extract.services.factory.AsyncOpenAI")
    def test_openai_client_is_cached(self, mock_openai: MagicMock) -> None:
        """Repeated access returns the same client."""
        factory = ServiceFactory(config=PipelineConfig())
        assert factory.openai_client is factory.openai_client
        mock_openai.assert_called_once()

    def test_missing_api_key_raises_configuration_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without OPENAI_API_KEY the client fails as a ConfigurationError."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        factory = ServiceFactory(config=PipelineConfig())

        with pytest.raises(ConfigurationError, match="OpenAI client"):
            _ = factory.openai_client

        assert "openai_client" not in factory.__dict__

    async def test_http_client_configured(self) -> None:
        """The HTTP client gets the fetch timeout."""
        factory = ServiceFactory(config=PipelineConfig(fetch_timeout=7.5))

        client = factory.http_client
        try:
            assert isinstance(client, httpx.AsyncClient)
            assert client.timeout.read == 7.5
            assert factory.http_client is client
        finally:
            await client.aclose()


@patch("recipe_extract.services.factory.AsyncOpenAI")
class TestServiceFactoryCreate:
    """Tests for the create_* methods."""

    async def test_create_resolver(self, mock_openai: MagicMock) -> None:
        """Resolver uses the shared HTTP client and configured endpoint."""
        from recipe_extract.resolver import MetadataResolver

        config = PipelineConfig(metadata_endpoint="https://meta.internal/", max_content_chars=99)
        async with ServiceFactory(config=config) as factory:
            resolver = factory.create_resolver()

            assert isinstance(resolver, MetadataResolver)
            assert resolver.client is factory.http_client
            assert resolver.endpoint == "https://meta.internal/"
            assert resolver.max_content_chars == 99

    def test_create_extractor(self, mock_openai: MagicMock) -> None:
        """Extractor uses the shared OpenAI client and configured model."""
        from recipe_extract.extractor import StructuredExtractor

        factory = ServiceFactory(config=PipelineConfig(model="gpt-4o", temperature=0.0))
        extractor = factory.create_extractor()

        assert isinstance(extractor, StructuredExtractor)
        assert extractor.client is mock_openai.return_value
        assert extractor.model == "gpt-4o"
        assert extractor.temperature == 0.0

    async def test_create_assembler(self, mock_openai: MagicMock) -> None:
        """Assembler is wired with resolve, extract and assemble stages."""
        from recipe_extract.pipeline import AssembleStage, ExtractStage, RecipeAssembler, ResolveStage

        mock_openai.return_value.close = AsyncMock()
        async with ServiceFactory(config=PipelineConfig()) as factory:
            assembler = factory.create_assembler()

        assert isinstance(assembler, RecipeAssembler)
        stage_types = [type(stage) for stage in assembler.pipeline.stages]
        assert stage_types == [ResolveStage, ExtractStage, AssembleStage]


class TestServiceFactoryClose:
    """Tests for client cleanup."""

    async def test_aclose_without_clients(self) -> None:
        """Closing a factory that created nothing is a no-op."""
        factory = ServiceFactory(config=PipelineConfig())
        await factory.aclose()
        assert "http_client" not in factory.__dict__
        assert "openai_client" not in factory.__dict__

    @patch("recipe_extract.services.factory.AsyncOpenAI")
    async def test_aclose_closes_created_clients(self, mock_openai: MagicMock) -> None:
        """Created clients are closed on exit."""
        mock_openai.return_value.close = AsyncMock()

        async with ServiceFactory(config=PipelineConfig()) as factory:
            http_client = factory.http_client
            _ = factory.openai_client

        assert http_client.is_closed
        mock_openai.return_value.close.assert_awaited_once()
