"""Pydantic models for every shape that crosses a pipeline boundary.

Payloads from the metadata service, the extraction service and the recipe
store are validated into these models instead of being passed around as
loose dictionaries.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import RecordMappingError

# ============================================================================
# Metadata service payload
# ============================================================================


class MicrolinkAsset(BaseModel):
    """An image or logo entry in a metadata response."""

    url: str | None = None

    model_config = ConfigDict(extra="ignore")


class MicrolinkData(BaseModel):
    """The ``data`` object of a metadata response."""

    title: str | None = None
    description: str | None = None
    image: MicrolinkAsset | None = None
    logo: MicrolinkAsset | None = None
    content: str | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def image_url(self) -> str | None:
        """Hero image URL, falling back to the site logo."""
        if self.image and self.image.url:
            return self.image.url
        if self.logo and self.logo.url:
            return self.logo.url
        return None


class MicrolinkResponse(BaseModel):
    """Top-level metadata response envelope."""

    status: str | None = None
    data: MicrolinkData

    model_config = ConfigDict(extra="ignore")


# ============================================================================
# Pipeline models
# ============================================================================


class ScrapedMetadata(BaseModel):
    """Page metadata produced by the metadata resolver."""

    title: str | None = None
    image_url: str | None = None
    description: str | None = None
    source: str
    raw_content: str = ""


class ExtractionResult(BaseModel):
    """Ingredients and instructions returned by the structured extractor.

    Both keys are required and both must be lists of strings. Strict mode
    rejects any coercion, so a malformed response never validates.
    """

    ingredients: list[str] = Field(
        description="One entry per ingredient line, in source order",
        examples=[["200g pasta", "2 eggs"]],
    )
    instructions: list[str] = Field(
        description="One entry per instruction step, in source order",
        examples=[["Boil water", "Cook pasta"]],
    )

    model_config = ConfigDict(strict=True, extra="ignore")


class Outcome(str, Enum):
    """How completely a recipe was enriched."""

    FULL = "full"
    PARTIAL = "partial"


class DegradationReason(str, Enum):
    """Why a recipe ended up with a partial outcome."""

    NO_CONTENT = "no_content"
    QUOTA_EXCEEDED = "quota_exceeded"
    EXTRACTION_FAILED = "extraction_failed"
    EMPTY_EXTRACTION = "empty_extraction"


QUOTA_MESSAGE = (
    "Recipe parsing is temporarily unavailable due to API limits. "
    "Basic recipe information has been saved."
)
BASIC_INFO_MESSAGE = (
    "Recipe saved with basic information only. Add ingredients and instructions manually."
)


class NormalizedRecipe(BaseModel):
    """The pipeline's output, shaped for the persistence layer."""

    title: str
    image_url: str | None = None
    description: str
    source: str
    url: str
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    outcome: Outcome = Outcome.FULL
    degradation: DegradationReason | None = None
    message: str | None = None

    @property
    def is_full(self) -> bool:
        """Check if extraction fully enriched the recipe."""
        return self.outcome is Outcome.FULL

    def to_record(self) -> dict[str, Any]:
        """Return the row stored in the recipe library table."""
        return {
            "url": self.url,
            "title": self.title,
            "image_url": self.image_url,
            "description": self.description,
            "source": self.source,
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
        }


# ============================================================================
# Stored records
# ============================================================================


class LibraryRecipe(BaseModel):
    """A row of the shared recipe library table."""

    id: str
    url: str
    title: str
    image_url: str | None = None
    description: str | None = None
    source: str | None = None
    ingredients: list[str] | None = None
    instructions: list[str] | None = None

    model_config = ConfigDict(extra="ignore")


class UserRecipeRow(BaseModel):
    """A user's saved recipe joined with its library recipe."""

    id: str
    rating: int | None = None
    cook_count: int | None = None
    last_cooked: datetime | None = None
    notes: str | None = None
    tags: list[str] | None = None
    created_at: datetime | None = None
    recipe: LibraryRecipe

    model_config = ConfigDict(extra="ignore")


class SavedRecipe(BaseModel):
    """Flat view of a saved recipe as the application lists it."""

    id: str
    user_recipe_id: str
    title: str
    url: str
    image_url: str | None = None
    description: str | None = None
    source: str | None = None
    rating: int | None = None
    cook_count: int = 0
    last_cooked: datetime | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SavedRecipe":
        """Map a joined user-recipe row onto a flat record.

        Raises:
            RecordMappingError: If the row or its nested recipe is malformed
        """
        try:
            parsed = UserRecipeRow.model_validate(row)
        except ValidationError as e:
            raise RecordMappingError(
                "Stored recipe row does not match the expected shape",
                user_recipe_id=str(row.get("id")) if isinstance(row, dict) else None,
                errors=e.error_count(),
            ) from e

        recipe = parsed.recipe
        return cls(
            id=recipe.id,
            user_recipe_id=parsed.id,
            title=recipe.title,
            url=recipe.url,
            image_url=recipe.image_url,
            description=recipe.description,
            source=recipe.source,
            rating=parsed.rating,
            cook_count=parsed.cook_count or 0,
            last_cooked=parsed.last_cooked,
            notes=parsed.notes,
            tags=parsed.tags or [],
        )
