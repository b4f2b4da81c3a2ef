"""Command-line interface for the inbox model router.

Provides commands for configuration validation, taxonomy inspection, and
classifying or routing a single email from the terminal.

Usage:
    python -m inbox_router validate-config
    python -m inbox_router categories
    python -m inbox_router quick-check "We want to cancel"
    python -m inbox_router classify --subject "Renewal" thread.txt
    python -m inbox_router route --subject "Renewal" --base-prompt "You draft replies." thread.txt
"""

from __future__ import annotations

import asyncio
import json
import sys
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import click
from rich.console import Console
from rich.table import Table

from inbox_router.config import validate_config_file
from inbox_router.core.logging import configure_logging

if TYPE_CHECKING:
    from inbox_router.config_schema import AppConfig
    from inbox_router.routing.categories import ClassificationInput
    from inbox_router.routing.classifier import EmailClassifier
    from inbox_router.routing.router import ModelRouter
    from inbox_router.routing.telemetry import RoutingMetrics

console = Console()

DEFAULT_BASE_PROMPT = (
    "You are a customer success manager drafting a reply to the email thread below. "
    "Write a clear, professional response on the user's behalf."
)


@dataclass(frozen=True, slots=True)
class CLIDeps:
    """Shared dependencies initialized by _init_cli_deps()."""

    config: AppConfig
    metrics: RoutingMetrics
    classifier: EmailClassifier
    router: ModelRouter


def _init_cli_deps() -> CLIDeps:
    """Initialize config, provider, classifier and router.

    Prints actionable error messages and calls sys.exit(1) on failure.
    """
    from inbox_router.config import get_config, get_routing_config
    from inbox_router.core.errors import (
        ConfigLoadError,
        ConfigValidationError,
        ProviderNotConfiguredError,
    )
    from inbox_router.providers.anthropic_provider import build_model_factory
    from inbox_router.routing.classifier import EmailClassifier
    from inbox_router.routing.router import ModelRouter
    from inbox_router.routing.telemetry import RoutingMetrics, StructlogTelemetry

    # 1. Load config
    try:
        config = get_config()
        get_routing_config()
    except (ConfigLoadError, ConfigValidationError) as e:
        console.print(
            f"[red]Config error:[/red] {e}\n\n"
            "Run [cyan]validate-config[/cyan] for details."
        )
        sys.exit(1)

    # 2. Initialize provider
    try:
        model_factory = build_model_factory(config.provider)
    except ProviderNotConfiguredError as e:
        console.print(f"[red]Provider error:[/red] {e}")
        sys.exit(1)

    # 3. Wire classifier and router around one telemetry sink
    metrics = RoutingMetrics()
    telemetry = StructlogTelemetry(metrics=metrics)
    classifier = EmailClassifier(
        model_factory=model_factory,
        settings=config.classifier,
        telemetry=telemetry,
    )
    router = ModelRouter(
        classifier=classifier,
        model_factory=model_factory,
        telemetry=telemetry,
    )

    return CLIDeps(config=config, metrics=metrics, classifier=classifier, router=router)


def _email_options(func):
    """Shared options describing the email being classified or routed."""
    func = click.argument("body", type=click.File("r"), default="-")(func)
    func = click.option(
        "--context", "sender_context", default=None, help="Known context about the sender"
    )(func)
    func = click.option("--sender-name", default=None, help="Sender display name")(func)
    func = click.option("--sender-email", default=None, help="Sender email address")(func)
    func = click.option("--subject", "-s", required=True, help="Email subject line")(func)
    return func


def _build_input(
    subject: str,
    sender_email: str | None,
    sender_name: str | None,
    sender_context: str | None,
    body: TextIO,
) -> ClassificationInput:
    from inbox_router.routing.categories import ClassificationInput

    return ClassificationInput(
        thread_content=body.read(),
        subject=subject,
        sender_name=sender_name,
        sender_email=sender_email,
        sender_context=sender_context,
    )


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug logging")
def cli(debug: bool) -> None:
    """Inbox model router - classify email and pick the right model tier."""
    log_level = "DEBUG" if debug else "WARNING"
    configure_logging(log_level=log_level, json_output=False)


@cli.command("validate-config")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file (default: config/config.yaml)",
)
def validate_config(config_path: Path | None) -> None:
    """Validate the configuration file and environment overrides."""
    if config_path:
        console.print(f"Validating config: [cyan]{config_path}[/cyan]")
    else:
        console.print("Validating config: [cyan]config/config.yaml[/cyan] (optional)")

    is_valid, message = validate_config_file(config_path)

    if is_valid:
        console.print(f"\n[green]✓[/green] {message}")
        sys.exit(0)
    else:
        console.print(f"\n[red]✗[/red] {message}")
        sys.exit(1)


@cli.command("categories")
def categories() -> None:
    """List the category taxonomy with tiers and enhancement coverage."""
    from inbox_router.routing.categories import ALL_CATEGORIES, CATEGORY_METADATA
    from inbox_router.routing.enhanced_prompts import get_enhanced_prompt

    table = Table(title="Email categories")
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Tier")
    table.add_column("Label")
    table.add_column("Description")
    table.add_column("Enhanced", justify="center")

    for category in ALL_CATEGORIES:
        info = CATEGORY_METADATA[category]
        tier_style = "red" if info.tier == "frontier" else "green"
        table.add_row(
            category,
            f"[{tier_style}]{info.tier}[/{tier_style}]",
            info.label,
            info.description,
            "yes" if get_enhanced_prompt(category) else "-",
        )

    console.print(table)


@cli.command("quick-check")
@click.argument("text")
def quick_check(text: str) -> None:
    """Run the zero-cost high-stakes heuristic on TEXT."""
    from inbox_router.routing.classifier import quick_classification

    classification = quick_classification(text)
    if classification.is_high_stakes:
        console.print(f"[red]high-stakes[/red] -> {classification.category} ({classification.tier})")
    else:
        console.print(f"[green]routine[/green] -> {classification.category} ({classification.tier})")


@cli.command("classify")
@_email_options
def classify(
    subject: str,
    sender_email: str | None,
    sender_name: str | None,
    sender_context: str | None,
    body: TextIO,
) -> None:
    """Classify an email read from BODY (a file, or - for stdin)."""
    classification_input = _build_input(subject, sender_email, sender_name, sender_context, body)
    deps = _init_cli_deps()

    classification = asyncio.run(deps.classifier.classify(classification_input))
    click.echo(json.dumps(classification.to_dict(), indent=2))


@cli.command("route")
@_email_options
@click.option("--base-prompt", default=DEFAULT_BASE_PROMPT, help="Base system prompt to decorate")
@click.option("--session-id", default=None, help="Session ID for telemetry (random if omitted)")
@click.option(
    "--force-tier",
    type=click.Choice(["light", "frontier"]),
    default=None,
    help="Skip classification and use this tier",
)
@click.option("--quick", "use_quick_check", is_flag=True, help="Use the regex quick check")
@click.option("--show-prompt", is_flag=True, help="Print the composed system prompt")
def route(
    subject: str,
    sender_email: str | None,
    sender_name: str | None,
    sender_context: str | None,
    body: TextIO,
    base_prompt: str,
    session_id: str | None,
    force_tier: str | None,
    use_quick_check: bool,
    show_prompt: bool,
) -> None:
    """Route an email read from BODY (a file, or - for stdin) to a model."""
    classification_input = _build_input(subject, sender_email, sender_name, sender_context, body)
    deps = _init_cli_deps()

    result = asyncio.run(
        deps.router.route_email(
            classification_input,
            base_prompt=base_prompt,
            session_id=session_id or str(uuid.uuid4()),
            force_tier=force_tier,
            use_quick_check=use_quick_check,
        )
    )

    summary = result.classification_summary
    tier_style = "red" if summary.is_high_stakes else "green"
    console.print(f"Model: [cyan]{result.model_id}[/cyan]")
    console.print(f"Tier: [{tier_style}]{summary.tier}[/{tier_style}]")
    console.print(f"Category: {summary.category}")
    console.print(f"Confidence: {result.classification.confidence:.0%}")
    console.print(f"Reason: {summary.reason}")
    console.print(f"Enhanced prompt: {'yes' if result.enhanced else 'no'}")

    if show_prompt:
        console.print("\n[bold]System prompt[/bold]")
        console.print(result.system_prompt, markup=False)

    stats = deps.metrics.get_stats()
    console.print(
        f"\nStats: {stats.total} classified, {stats.routed_total} routed, "
        f"{stats.frontier_percentage:.0f}% frontier"
    )


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
