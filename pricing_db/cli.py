"""
Pricing DB CLI
==============
Cost a Gemini response, price token usage and inspect pricing data.

Examples:
    cat response.json | pricing-db gemini
    pricing-db gemini -f response.json --batch --human
    pricing-db cost gpt-4o 1000 500 --cached 200
    pricing-db validate ./configs
"""

import json
import sys
from pathlib import Path
from typing import Annotated, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pricing_db import __version__
from pricing_db.config import get_settings
from pricing_db.core.exceptions import LoadError, ResponseParseError
from pricing_db.core.gemini import calculate_gemini_response_cost
from pricing_db.core.logging import configure_logging
from pricing_db.core.pricing import PricingEngine
from pricing_db.schemas.costs import CostDetails

app = typer.Typer(
    name="pricing-db",
    help="Cost calculation for AI and non-AI providers.",
    no_args_is_help=True,
)

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
logger = structlog.get_logger()

# Set by the callback
_config_dir: Optional[Path] = None


def _version_callback(value: bool) -> None:
    if value:
        print(f"pricing-db {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    config_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--config-dir",
            help="Directory of *_pricing.yaml files (default: PRICING_CONFIG_DIR or bundled data)",
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
):
    """Pricing DB: token, credit, image and grounding costs.

    Environment: PRICING_DEFAULT_MODEL, PRICING_BATCH_MODE, PRICING_LOG_LEVEL.
    """
    global _config_dir
    _config_dir = config_dir


def _setup_logging(verbose: bool) -> None:
    settings = get_settings()
    if verbose:
        level = "DEBUG"
    elif "log_level" in settings.model_fields_set:
        level = settings.log_level
    else:
        level = "WARNING"
    configure_logging(level, "console")


def _load_engine() -> PricingEngine:
    try:
        return PricingEngine.from_directory(_config_dir)
    except LoadError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", markup=True)
        raise typer.Exit(1) from e


def _read_input(file: Optional[Path]) -> str:
    if file is not None:
        logger.debug("Reading input from file", path=str(file))
        try:
            return file.read_text(encoding="utf-8")
        except OSError as e:
            err_console.print(
                f"[red]Error:[/red] failed to read {escape(str(file))}: {escape(str(e))}",
                markup=True,
            )
            raise typer.Exit(1) from e

    if sys.stdin.isatty():
        # Nothing piped in
        console.print("Usage: pricing-db gemini [-f FILE] (or pipe a response on stdin)", markup=False)
        raise typer.Exit(0)

    logger.debug("Reading input from stdin")
    return sys.stdin.read()


def _print_details_json(details: CostDetails) -> None:
    print(json.dumps(details.model_dump(), indent=2))


def _print_details_human(details: CostDetails, title: str) -> None:
    console.print(title, markup=False)
    console.print("=" * len(title), markup=False)

    if details.unknown:
        console.print("[yellow]WARNING: Model not found in pricing database[/yellow]")
        console.print()

    console.print(f"Tier: {details.tier_applied or 'standard'}", markup=False)
    if details.batch_mode:
        console.print("Batch Mode: enabled")

    console.print()
    console.print("Input Costs:")
    console.print(f"  Standard:  ${details.standard_input_cost:.6f}", markup=False)
    console.print(f"  Cached:    ${details.cached_input_cost:.6f}", markup=False)

    console.print()
    console.print("Output Costs:")
    console.print(f"  Output:    ${details.output_cost:.6f}", markup=False)
    console.print(f"  Thinking:  ${details.thinking_cost:.6f}", markup=False)

    if details.grounding_cost > 0:
        console.print()
        console.print(f"Grounding:   ${details.grounding_cost:.6f}", markup=False)

    if details.batch_discount > 0:
        console.print()
        console.print(f"Batch Discount: ${details.batch_discount:.6f}", markup=False)

    console.print()
    console.print(f"[bold]Total:       ${details.total_cost:.6f}[/bold]")

    if details.warnings:
        console.print()
        console.print("Warnings:")
        for warning in details.warnings:
            console.print(f"  - {warning}", markup=False)


@app.command()
def gemini(
    file: Annotated[
        Optional[Path],
        typer.Option("-f", "--file", help="Read the response JSON from a file (default: stdin)"),
    ] = None,
    batch: Annotated[
        bool, typer.Option("--batch", help="Apply batch mode pricing")
    ] = False,
    human: Annotated[
        bool, typer.Option("--human", help="Human-readable output (default: JSON)")
    ] = False,
    model: Annotated[
        Optional[str],
        typer.Option("--model", help="Model name when the response has no modelVersion"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Debug logging")
    ] = False,
):
    """Calculate the cost of a Gemini generateContent response."""
    _setup_logging(verbose)
    settings = get_settings()

    # Flags override environment settings
    model = model or settings.default_model or None
    batch_mode = batch or settings.batch_mode
    logger.debug("Configuration resolved", model=model, batch_mode=batch_mode)

    payload = _read_input(file)
    if not payload.strip():
        err_console.print("[red]Error:[/red] no input provided", markup=True)
        raise typer.Exit(1)

    engine = _load_engine()
    try:
        details = calculate_gemini_response_cost(
            engine, payload, model=model, batch_mode=batch_mode
        )
    except ResponseParseError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", markup=True)
        raise typer.Exit(1) from e

    logger.debug("Calculation complete", total_cost=details.total_cost, unknown=details.unknown)

    if human:
        _print_details_human(details, "Gemini Pricing Breakdown")
    else:
        _print_details_json(details)


@app.command()
def cost(
    model: Annotated[str, typer.Argument(help="Model name, optionally provider/model")],
    input_tokens: Annotated[int, typer.Argument(help="Input tokens")],
    output_tokens: Annotated[int, typer.Argument(help="Output tokens")],
    cached: Annotated[
        int, typer.Option("--cached", help="Input tokens served from cache")
    ] = 0,
    batch: Annotated[
        bool, typer.Option("--batch", help="Apply batch mode pricing")
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", help="JSON output")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Debug logging")
    ] = False,
):
    """Calculate the cost of token usage for a model."""
    _setup_logging(verbose)
    batch_mode = batch or get_settings().batch_mode

    engine = _load_engine()
    details = engine.calculate_with_options(
        model, input_tokens, output_tokens, cached, batch_mode=batch_mode
    )

    if json_output:
        _print_details_json(details)
    else:
        _print_details_human(details, f"Cost Breakdown: {model}")


@app.command()
def providers():
    """List loaded providers."""
    _setup_logging(False)
    engine = _load_engine()

    table = Table(title="Providers", show_header=True, header_style="bold")
    table.add_column("Provider")
    table.add_column("Billing")
    table.add_column("Models", justify="right")
    table.add_column("Image Models", justify="right")
    table.add_column("Updated")

    for name in engine.list_providers():
        pricing = engine.get_provider_metadata(name)
        if pricing is None:
            continue
        table.add_row(
            name,
            pricing.billing_type,
            str(len(pricing.models)),
            str(len(pricing.image_models)),
            pricing.metadata.updated,
        )

    console.print(table)
    console.print(
        f"{engine.provider_count()} providers, {engine.model_count()} model keys",
        markup=False,
    )


@app.command()
def validate(
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Directory to validate (default: the configured pricing directory)"),
    ] = None,
):
    """Load and validate a directory of pricing documents."""
    _setup_logging(False)
    directory = directory or _config_dir or get_settings().config_dir

    try:
        engine = PricingEngine.from_directory(directory)
    except LoadError as e:
        err_console.print(f"[red]Invalid:[/red] {escape(str(e))}", markup=True)
        raise typer.Exit(1) from e

    console.print(
        f"[green]OK[/green] {escape(str(directory))}: "
        f"{engine.provider_count()} providers, {engine.model_count()} model keys"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
