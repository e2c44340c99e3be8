"""Protocol definitions for recipe_extract.

The pipeline stages depend on these interfaces rather than on the concrete
HTTP and OpenAI backed classes, so tests and callers can substitute their
own implementations.

Example:
    >>> class StaticResolver:
    ...     async def resolve(self, url: str) -> ScrapedMetadata:
    ...         return ScrapedMetadata(title="Pasta", source="example.com")
    ...
    >>> isinstance(StaticResolver(), MetadataSource)
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import ExtractionResult, ScrapedMetadata


@runtime_checkable
class MetadataSource(Protocol):
    """Protocol for resolving a URL to page metadata."""

    async def resolve(self, url: str) -> ScrapedMetadata:
        """Resolve page metadata for a URL.

        Raises:
            FetchError: If the URL cannot be retrieved
            NoContentError: If no usable content is returned
        """
        ...


@runtime_checkable
class ContentExtractor(Protocol):
    """Protocol for turning page content into ingredient and instruction lists."""

    async def extract(self, url: str, content: str) -> ExtractionResult:
        """Extract structured lists from non-empty content.

        Raises:
            ExtractionError: If extraction fails for any reason
        """
        ...


@runtime_checkable
class RecipeStore(Protocol):
    """Protocol for the persistence collaborator.

    The pipeline never calls this itself. It returns records shaped for it
    (see ``NormalizedRecipe.to_record``).
    """

    async def save(
        self,
        record: dict[str, Any],
        user_id: str,
        tags: list[str] | None = None,
        rating: int | None = None,
    ) -> str:
        """Persist a recipe record for a user and return the saved id."""
        ...
