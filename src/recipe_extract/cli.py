#!/usr/bin/env python3
"""CLI for recipe-extract: turn a recipe URL into a normalized recipe.

The CLI is responsible for:
- Argument parsing
- Progress display (Rich UI)
- Error presentation
- Calling the assembler for business logic

Exit codes: 0 for full and partial outcomes, 1 for fatal errors.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import VALID_MODELS, PipelineConfig
from .exceptions import (
    ConfigurationError,
    FetchError,
    NoContentError,
    RecipeExtractError,
    TitleMissingError,
)
from .models import NormalizedRecipe
from .services import ServiceFactory

logger = logging.getLogger(__name__)
console = Console()

# User-facing explanations for fatal errors
FATAL_MESSAGES: dict[type[RecipeExtractError], str] = {
    FetchError: "Could not fetch the recipe. Check the URL and try again.",
    NoContentError: "The page returned no recipe content.",
    TitleMissingError: "Could not find a recipe title on the page.",
}


def setup_logging(log_file: str = "recipe_extract.log", verbose: bool = False) -> None:
    """Set up logging for the application.

    Logs go to a file. With verbose, they are also written to stderr.
    Console output for the user is handled separately via Rich.
    """
    handlers: list[logging.Handler] = [logging.FileHandler(log_file, mode="a")]
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract a normalized recipe from a recipe URL", prog="recipe-extract"
    )
    parser.add_argument("url", type=str, help="Recipe page URL")
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        choices=sorted(VALID_MODELS),
        help="OpenAI model to use (default: from configuration)",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to a TOML config file")
    parser.add_argument("--json", action="store_true", help="Print the recipe as JSON")
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging, also to stderr (sets debug_mode)"
    )
    return parser.parse_args(argv)


def display_recipe(recipe: NormalizedRecipe) -> None:
    """Display the assembled recipe."""
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]{recipe.title}[/bold cyan]\n"
            f"[dim]{recipe.description}[/dim]\n\n"
            f"Source: {recipe.source}\n"
            f"URL: {recipe.url}",
            title="[bold]Recipe[/bold]",
            border_style="cyan",
        )
    )

    if recipe.ingredients:
        table = Table(title="Ingredients", show_header=False, header_style="bold cyan")
        table.add_column("Ingredient", style="green")
        for ingredient in recipe.ingredients:
            table.add_row(ingredient)
        console.print(table)

    if recipe.instructions:
        table = Table(title="Instructions", show_header=False)
        table.add_column("Step", style="cyan", justify="right")
        table.add_column("Instruction")
        for number, step in enumerate(recipe.instructions, 1):
            table.add_row(str(number), step)
        console.print(table)

    if recipe.is_full:
        console.print("[green]✓[/green] Recipe fully extracted")
    else:
        console.print(
            Panel(
                recipe.message or "",
                title="[bold yellow]Saved with basic information[/bold yellow]",
                border_style="yellow",
            )
        )
    console.print()


def display_error(title: str, message: str) -> None:
    """Display an error panel."""
    console.print()
    console.print(
        Panel(
            message,
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
        )
    )
    console.print()


def load_config(args: argparse.Namespace) -> PipelineConfig:
    """Load configuration and apply CLI overrides."""
    config = PipelineConfig.load(config_path=args.config)
    if args.model:
        config.update(model=args.model)
    if args.verbose:
        config.update(debug_mode=True)
    return config


async def main_async(argv: list[str] | None = None) -> int:
    """Assemble one recipe and display it.

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        display_error("Configuration error", str(e))
        return 1

    setup_logging(verbose=config.debug_mode)

    async with ServiceFactory(config=config) as factory:
        try:
            assembler = factory.create_assembler()
        except ConfigurationError as e:
            logger.error(f"Could not create services: {e}")
            display_error("Configuration error", str(e))
            return 1

        try:
            with console.status("Extracting recipe...", spinner="dots"):
                recipe = await assembler.assemble(args.url)
        except RecipeExtractError as e:
            logger.error(f"Failed to assemble recipe from {args.url}: {e}")
            display_error("Could not save recipe", FATAL_MESSAGES.get(type(e), str(e)))
            return 1

    if args.json:
        print(json.dumps(recipe.model_dump(mode="json"), indent=2))
    else:
        display_recipe(recipe)
    return 0


def main() -> None:
    """Entry point for the recipe-extract CLI command."""
    try:
        exit_code = asyncio.run(main_async())
    except KeyboardInterrupt:
        console.print()
        console.print("[yellow]Interrupted[/yellow]")
        exit_code = 130
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
