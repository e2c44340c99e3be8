"""Pytest configuration and fixtures for recipe_extract tests.

Fixtures follow pytest conventions:
- Use monkeypatch for environment manipulation
- Use tmp_path for file operations
- Use httpx.MockTransport for the metadata service
"""

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all RECIPE_EXTRACT_* environment variables."""
    import os

    for key in list(os.environ.keys()):
        if key.startswith("RECIPE_EXTRACT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def mock_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Provide a helper to set RECIPE_EXTRACT_* environment variables.

    Example:
        def test_env_loading(mock_env):
            mock_env["MODEL"] = "gpt-4o"
            # RECIPE_EXTRACT_MODEL is now set
    """

    class EnvSetter(dict[str, str]):
        def __setitem__(self, key: str, value: str) -> None:
            super().__setitem__(key, value)
            monkeypatch.setenv(f"RECIPE_EXTRACT_{key}", value)

    return EnvSetter()


@pytest.fixture
def default_config():
    """Create a default PipelineConfig instance."""
    from recipe_extract.config import PipelineConfig

    return PipelineConfig()


# ============================================================================
# Metadata Service Fixtures
# ============================================================================


@pytest.fixture
def microlink_payload() -> dict[str, Any]:
    """Provide a successful metadata service response body."""
    return {
        "status": "success",
        "data": {
            "title": "Pasta",
            "description": None,
            "image": {"url": "https://cooking.example/pasta.jpg"},
            "logo": {"url": "https://cooking.example/logo.png"},
            "content": "Ingredients: 200g pasta, 2 eggs. Boil water. Cook pasta.",
        },
    }


@pytest.fixture
def make_http_client() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by a handler.

    The handler may return an httpx.Response, a dict (sent as JSON with
    status 200), or raise an httpx exception.
    """

    def factory(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
        def wrapped(request: httpx.Request) -> httpx.Response:
            result = handler(request)
            if isinstance(result, httpx.Response):
                return result
            return httpx.Response(200, content=json.dumps(result).encode())

        return httpx.AsyncClient(transport=httpx.MockTransport(wrapped))

    return factory


# ============================================================================
# Extraction Service Fixtures
# ============================================================================


@pytest.fixture
def make_openai_client() -> Callable[..., MagicMock]:
    """Build a mock AsyncOpenAI client.

    Pass ``output_text`` for a successful response body, or ``error`` for an
    exception raised by ``responses.create``.
    """

    def factory(output_text: str | None = None, error: Exception | None = None) -> MagicMock:
        client = MagicMock()
        if error is not None:
            client.responses.create = AsyncMock(side_effect=error)
        else:
            response = MagicMock()
            response.output_text = output_text
            client.responses.create = AsyncMock(return_value=response)
        return client

    return factory


@pytest.fixture
def extraction_json() -> str:
    """Provide a well-formed extraction response body."""
    return json.dumps(
        {
            "ingredients": ["200g pasta", "2 eggs"],
            "instructions": ["Boil water", "Cook pasta"],
        }
    )


# ============================================================================
# Pipeline Fixtures
# ============================================================================


@pytest.fixture
def sample_metadata():
    """Create resolved metadata for the pasta scenario."""
    from recipe_extract.models import ScrapedMetadata

    return ScrapedMetadata(
        title="Pasta",
        image_url="https://cooking.example/pasta.jpg",
        description=None,
        source="cooking.example",
        raw_content="Ingredients: 200g pasta, 2 eggs. Boil water. Cook pasta.",
    )


@pytest.fixture
def sample_extraction():
    """Create an extraction result for the pasta scenario."""
    from recipe_extract.models import ExtractionResult

    return ExtractionResult(
        ingredients=["200g pasta", "2 eggs"],
        instructions=["Boil water", "Cook pasta"],
    )


@pytest.fixture
def mock_resolver(sample_metadata) -> MagicMock:
    """Resolver stub returning the pasta metadata."""
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=sample_metadata)
    return resolver


@pytest.fixture
def mock_extractor(sample_extraction) -> MagicMock:
    """Extractor stub returning the pasta extraction."""
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=sample_extraction)
    return extractor
