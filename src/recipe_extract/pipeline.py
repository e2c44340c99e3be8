"""Pipeline architecture for recipe assembly.

A recipe URL passes through three stages that share a ``PipelineContext``:

1. **ResolveStage**: fetch page metadata, reject pages without a title
2. **ExtractStage**: extract ingredients and instructions, absorbing failures
3. **AssembleStage**: build the ``NormalizedRecipe`` and its outcome

Fatal errors (``ResolutionError``) propagate out of ``RecipeAssembler.assemble``
with no record. Extraction errors never do: they become a ``partial`` outcome.

Example:
    >>> assembler = RecipeAssembler(resolver, extractor)
    >>> recipe = await assembler.assemble("https://cooking.example/pasta")
    >>> recipe.outcome
    <Outcome.FULL: 'full'>
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .exceptions import ExtractionError, QuotaExceededError, TitleMissingError
from .models import (
    BASIC_INFO_MESSAGE,
    QUOTA_MESSAGE,
    DegradationReason,
    ExtractionResult,
    NormalizedRecipe,
    Outcome,
    ScrapedMetadata,
)
from .protocols import ContentExtractor, MetadataSource

logger = logging.getLogger(__name__)


def default_description(source: str) -> str:
    """Description used when the page provides none."""
    return f"Recipe from {source}"


@dataclass
class PipelineContext:
    """Shared state passed through pipeline stages.

    Attributes:
        url: The recipe URL being assembled

        metadata: Page metadata (populated by ResolveStage)
        extraction: Extraction result (populated by ExtractStage on success)
        degradation: Why extraction was skipped or failed (populated by ExtractStage)
        recipe: Final record (populated by AssembleStage)
    """

    url: str

    metadata: ScrapedMetadata | None = None
    extraction: ExtractionResult | None = None
    degradation: DegradationReason | None = None
    recipe: NormalizedRecipe | None = None


class PipelineStage(ABC):
    """Abstract base class for pipeline stages.

    Stages hold their collaborators but no per-request state. Everything
    produced for a request lives on the context.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this stage."""
        ...

    @abstractmethod
    async def execute(self, ctx: PipelineContext) -> None:
        """Execute this pipeline stage."""
        ...


class ResolveStage(PipelineStage):
    """Stage 1: Resolve page metadata.

    Populates:
        - ctx.metadata

    Raises:
        FetchError, NoContentError: Propagated from the resolver
        TitleMissingError: If the page has no title
    """

    def __init__(self, resolver: MetadataSource) -> None:
        self.resolver = resolver

    @property
    def name(self) -> str:
        """Stage name."""
        return "Resolve"

    async def execute(self, ctx: PipelineContext) -> None:
        """Resolve metadata and require a title."""
        metadata = await self.resolver.resolve(ctx.url)

        if metadata.title is None or not metadata.title.strip():
            logger.error(f"No title found for {ctx.url}")
            raise TitleMissingError("Could not extract recipe title", url=ctx.url)

        ctx.metadata = metadata


class ExtractStage(PipelineStage):
    """Stage 2: Extract ingredients and instructions.

    Never raises extraction errors. A skipped or failed extraction is
    recorded as ctx.degradation instead.

    Populates:
        - ctx.extraction (on success)
        - ctx.degradation (on skip or failure)
    """

    def __init__(self, extractor: ContentExtractor) -> None:
        self.extractor = extractor

    @property
    def name(self) -> str:
        """Stage name."""
        return "Extract"

    async def execute(self, ctx: PipelineContext) -> None:
        """Run extraction on the resolved content, if any."""
        if ctx.metadata is None:
            raise RuntimeError("ExtractStage requires resolved metadata")

        content = ctx.metadata.raw_content
        if not content.strip():
            logger.warning(f"No content to extract for {ctx.url}, skipping extraction")
            ctx.degradation = DegradationReason.NO_CONTENT
            return

        try:
            ctx.extraction = await self.extractor.extract(ctx.url, content)
        except QuotaExceededError as e:
            logger.warning(f"Extraction quota exceeded for {ctx.url}: {e}")
            ctx.degradation = DegradationReason.QUOTA_EXCEEDED
        except ExtractionError as e:
            logger.warning(f"Extraction failed for {ctx.url}: {e}")
            ctx.degradation = DegradationReason.EXTRACTION_FAILED


class AssembleStage(PipelineStage):
    """Stage 3: Build the normalized recipe.

    Populates:
        - ctx.recipe
    """

    @property
    def name(self) -> str:
        """Stage name."""
        return "Assemble"

    async def execute(self, ctx: PipelineContext) -> None:
        """Combine metadata and extraction into a NormalizedRecipe."""
        metadata = ctx.metadata
        if metadata is None or metadata.title is None:
            raise RuntimeError("AssembleStage requires resolved metadata with a title")

        ingredients: list[str] = []
        instructions: list[str] = []
        degradation = ctx.degradation

        if ctx.extraction is not None:
            ingredients = list(ctx.extraction.ingredients)
            instructions = list(ctx.extraction.instructions)
            if not ingredients or not instructions:
                degradation = DegradationReason.EMPTY_EXTRACTION

        outcome = Outcome.PARTIAL if degradation is not None else Outcome.FULL
        message = None
        if degradation is DegradationReason.QUOTA_EXCEEDED:
            message = QUOTA_MESSAGE
        elif degradation is not None:
            message = BASIC_INFO_MESSAGE

        ctx.degradation = degradation
        ctx.recipe = NormalizedRecipe(
            title=metadata.title.strip(),
            image_url=metadata.image_url,
            description=metadata.description or default_description(metadata.source),
            source=metadata.source,
            url=ctx.url,
            ingredients=ingredients,
            instructions=instructions,
            outcome=outcome,
            degradation=degradation,
            message=message,
        )


class ExtractionPipeline:
    """Runs stages in order over a shared context.

    Attributes:
        stages: Ordered list of pipeline stages to execute
    """

    def __init__(self, stages: list[PipelineStage]) -> None:
        self.stages = stages

    async def run(self, ctx: PipelineContext) -> None:
        """Execute all pipeline stages in order.

        Raises:
            ResolutionError: If a stage hits a fatal failure
        """
        for stage in self.stages:
            logger.debug(f"Starting stage {stage.name} for {ctx.url}")
            await stage.execute(ctx)
            logger.debug(f"Completed stage {stage.name} for {ctx.url}")


class RecipeAssembler:
    """Assembles a normalized recipe from a URL.

    Attributes:
        pipeline: The stage pipeline run for each URL
    """

    def __init__(self, resolver: MetadataSource, extractor: ContentExtractor) -> None:
        self.pipeline = ExtractionPipeline(
            [
                ResolveStage(resolver),
                ExtractStage(extractor),
                AssembleStage(),
            ]
        )

    async def assemble(self, url: str) -> NormalizedRecipe:
        """Run the pipeline for one URL.

        Args:
            url: Absolute http(s) URL of the recipe page

        Returns:
            NormalizedRecipe with outcome ``full`` or ``partial``

        Raises:
            FetchError: If metadata could not be fetched
            NoContentError: If the page returned no content or description
            TitleMissingError: If the page has no title
        """
        ctx = PipelineContext(url=url)
        await self.pipeline.run(ctx)

        if ctx.recipe is None:
            raise RuntimeError("Pipeline finished without assembling a recipe")

        recipe = ctx.recipe
        if recipe.is_full:
            logger.info(f"Assembled '{recipe.title}' from {url}")
        else:
            logger.warning(
                f"Assembled '{recipe.title}' from {url} with partial outcome "
                f"({recipe.degradation.value if recipe.degradation else 'unknown'})"
            )
        return recipe
