"""Custom exceptions for recipe_extract.

The hierarchy separates failures that abort a pipeline invocation from
failures the assembler absorbs into a degraded recipe:

- ``ResolutionError`` and its subclasses are fatal. No recipe is produced.
- ``ExtractionError`` and its subclasses are non-fatal. The assembler turns
  them into a ``partial`` outcome with empty ingredients and instructions.

Example:
    >>> try:
    ...     raise FetchError("Metadata service returned an error", status_code=502)
    ... except RecipeExtractError as e:
    ...     print(f"Error in {e.context}: {e}")
"""


class RecipeExtractError(Exception):
    """Base exception for all recipe_extract errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about where/when the error occurred
    """

    def __init__(self, message: str, **context: str | int | float | bool | None) -> None:
        """Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional context (e.g., url="https://...", status_code=502)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigurationError(RecipeExtractError):
    """Error in configuration or settings.

    Raised when a configuration file cannot be read, a setting has an
    invalid value, or an unknown key is updated.
    """

    pass


# ============================================================================
# Resolution (fatal)
# ============================================================================


class ResolutionError(RecipeExtractError):
    """Metadata resolution could not produce a usable recipe base.

    Every subclass is fatal to a pipeline invocation.
    """

    pass


class FetchError(ResolutionError):
    """The metadata service could not retrieve the URL.

    Raised when:
    - The URL is not an absolute http(s) URL
    - The request fails at the transport level or times out
    - The service answers with a non-2xx status
    - The response body is not JSON or lacks a ``data`` object

    Example:
        >>> raise FetchError(
        ...     "Metadata service returned an error",
        ...     url="https://example.com/recipe",
        ...     status_code=502,
        ... )
    """

    pass


class NoContentError(ResolutionError):
    """The metadata service answered but returned neither content nor description."""

    pass


class TitleMissingError(ResolutionError):
    """The page has no extractable title, so the recipe cannot be saved."""

    pass


# ============================================================================
# Extraction (non-fatal)
# ============================================================================


class ExtractionError(RecipeExtractError):
    """Structured extraction of ingredients and instructions failed.

    The assembler catches this and degrades to a partial recipe.
    """

    pass


class InvalidResponseError(ExtractionError):
    """The extraction service answered with a body that failed strict validation.

    Raised for an empty body, a body that is not JSON, a JSON value that is
    not an object, a missing ``ingredients`` or ``instructions`` key, or a
    value that is not a list of strings.

    Example:
        >>> raise InvalidResponseError(
        ...     "Extraction response missing required keys",
        ...     url="https://example.com/recipe",
        ...     missing="instructions",
        ... )
    """

    pass


class QuotaExceededError(ExtractionError):
    """The extraction service is rate- or quota-limited.

    Signals "retry later" rather than a malformed input or service bug.
    """

    pass


class ExtractionServiceError(ExtractionError):
    """Any other extraction failure (network, timeout, 5xx, unknown error shape)."""

    pass


# ============================================================================
# Record mapping
# ============================================================================


class RecordMappingError(RecipeExtractError):
    """A stored row could not be mapped onto a typed recipe record."""

    pass
