"""Recipe Extract - turn recipe URLs into normalized recipe records.

This package resolves page metadata for a recipe URL, extracts ingredients
and instructions with a language model, and reconciles both into a single
record, degrading gracefully when extraction is unavailable.
"""

__version__ = "0.1.0"

from .exceptions import (
    ExtractionError,
    ExtractionServiceError,
    FetchError,
    InvalidResponseError,
    NoContentError,
    QuotaExceededError,
    RecipeExtractError,
    TitleMissingError,
)
from .extractor import StructuredExtractor
from .models import ExtractionResult, NormalizedRecipe, Outcome, ScrapedMetadata
from .pipeline import RecipeAssembler
from .resolver import MetadataResolver, derive_source

__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "ExtractionServiceError",
    "FetchError",
    "InvalidResponseError",
    "MetadataResolver",
    "NoContentError",
    "NormalizedRecipe",
    "Outcome",
    "QuotaExceededError",
    "RecipeAssembler",
    "RecipeExtractError",
    "ScrapedMetadata",
    "StructuredExtractor",
    "TitleMissingError",
    "derive_source",
]
