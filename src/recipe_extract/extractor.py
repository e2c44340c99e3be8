"""Structured extraction of ingredients and instructions via OpenAI.

The extraction contract is fixed: the model must answer with a JSON object
holding exactly two arrays of strings, ``ingredients`` and ``instructions``.
Responses are validated strictly and never coerced.
"""

from __future__ import annotations

import logging
from typing import Final

from openai import APIError, AsyncOpenAI, OpenAIError, RateLimitError
from openai.types.responses import EasyInputMessageParam
from pydantic import ValidationError

from .exceptions import (
    ExtractionError,
    ExtractionServiceError,
    InvalidResponseError,
    QuotaExceededError,
)
from .models import ExtractionResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT: Final[str] = (
    "You extract recipes from web page text.\n"
    "Respond with a JSON object containing exactly two keys:\n"
    '- "ingredients": an array of strings, one entry per ingredient line, '
    "including quantities and units as written\n"
    '- "instructions": an array of strings, one entry per preparation step\n'
    "Keep both arrays in the order they appear in the source. Do not number the "
    "steps. Do not invent ingredients or steps that are not in the text. If the "
    "text contains no recipe, return empty arrays."
)

# Error codes and types the service uses for quota or rate limiting
QUOTA_ERROR_CODES: Final[frozenset[str]] = frozenset(
    {"insufficient_quota", "rate_limit_exceeded", "quota_exceeded"}
)
QUOTA_MESSAGE_MARKERS: Final[tuple[str, ...]] = (
    "exceeded your current quota",
    "quota exceeded",
)


def classify_service_error(error: Exception) -> ExtractionError:
    """Map an extraction service failure onto the error taxonomy.

    This is the only place that inspects service error codes and messages.
    Anything not recognised as quota or rate limiting falls back to
    ExtractionServiceError.

    Args:
        error: Exception raised by the extraction service client

    Returns:
        QuotaExceededError or ExtractionServiceError (not raised)
    """
    if isinstance(error, RateLimitError):
        return QuotaExceededError("Extraction service is rate limited", error=str(error))

    if isinstance(error, APIError):
        if error.code in QUOTA_ERROR_CODES or error.type in QUOTA_ERROR_CODES:
            return QuotaExceededError(
                "Extraction service quota exceeded",
                code=error.code,
                type=error.type,
            )

    message = str(error).lower()
    if any(marker in message for marker in QUOTA_MESSAGE_MARKERS):
        return QuotaExceededError("Extraction service quota exceeded", error=str(error))

    return ExtractionServiceError(
        "Extraction service call failed",
        error_type=type(error).__name__,
        error=str(error),
    )


def build_user_prompt(url: str, content: str) -> str:
    """Build the user message carrying the page URL and content."""
    return f"Source URL: {url}\n\nPage content:\n{content}"


def parse_extraction_response(text: str | None) -> ExtractionResult:
    """Validate a raw response body into an ExtractionResult.

    Raises:
        InvalidResponseError: If the body is empty, not JSON, or has the wrong shape
    """
    if not text or not text.strip():
        raise InvalidResponseError("Extraction response was empty")

    try:
        return ExtractionResult.model_validate_json(text)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise InvalidResponseError(
            "Extraction response failed validation",
            field=location,
            reason=first["type"],
        ) from e


class StructuredExtractor:
    """Extracts ingredient and instruction lists from page content.

    Attributes:
        client: Async OpenAI client
        model: Model to use for extraction
        temperature: Sampling temperature

    Example:
        >>> extractor = StructuredExtractor(client=AsyncOpenAI(max_retries=0))
        >>> result = await extractor.extract(url, content)
        >>> result.ingredients
        ['200g pasta', '2 eggs']
    """

    DEFAULT_MODEL: Final[str] = "gpt-4o-mini"
    DEFAULT_TEMPERATURE: Final[float] = 0.2

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature

    async def extract(self, url: str, content: str) -> ExtractionResult:
        """Extract ingredients and instructions from content.

        Args:
            url: URL the content was taken from
            content: Non-empty text snapshot of the page

        Returns:
            ExtractionResult with both lists in source order

        Raises:
            ValueError: If content is empty
            QuotaExceededError: If the service is rate or quota limited
            InvalidResponseError: If the response fails strict validation
            ExtractionServiceError: For any other service failure
        """
        if not content or not content.strip():
            raise ValueError("content must be non-empty")

        logger.info(f"Extracting recipe structure for {url} ({len(content)} characters)")

        try:
            response = await self.client.responses.create(
                model=self.model,
                input=[
                    EasyInputMessageParam(role="system", content=SYSTEM_PROMPT),
                    EasyInputMessageParam(role="user", content=build_user_prompt(url, content)),
                ],
                text={"format": {"type": "json_object"}},
                temperature=self.temperature,
            )
        except OpenAIError as e:
            classified = classify_service_error(e)
            logger.warning(f"Extraction failed for {url}: {classified}")
            raise classified from e

        result = parse_extraction_response(response.output_text)
        logger.info(
            f"Extracted {len(result.ingredients)} ingredients and "
            f"{len(result.instructions)} instructions from {url}"
        )
        return result
