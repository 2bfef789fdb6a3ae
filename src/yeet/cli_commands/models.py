"""``yeet models`` — list the models a provider offers."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.markup import escape

from yeet.cli_commands._config import load_config_or_warn
from yeet.cli_commands._output import console, print_error
from yeet.config.settings import AUTO
from yeet.engine import Engine
from yeet.errors import YeetError


async def fetch_models(engine: Engine, provider: str | None) -> tuple[str, str, list[str]]:
    """Return ``(provider, current_model, models)``."""
    name = provider.lower() if provider else engine.config.active_provider
    if name == AUTO:
        name = engine.select().provider.name
    resolved = engine.config.resolve_provider(name, engine.registry)
    current = resolved.model if resolved else ""
    return name, current, await engine.list_models(name)


@click.command("models")
@click.argument("provider", required=False)
def models_cmd(provider: str | None) -> None:
    """List the models PROVIDER offers (default: the active provider)."""
    engine = Engine(load_config_or_warn())
    try:
        name, current, models = asyncio.run(fetch_models(engine, provider))
    except YeetError as exc:
        print_error(exc)
        sys.exit(1)

    if not models:
        console.print(f"  [yellow]{escape(name)} returned no models.[/yellow]")
        return

    console.print(f"\n  [bold]{escape(name)}[/bold]\n")
    for model in models:
        marker = "[green]●[/green]" if model == current else " "
        console.print(f"  {marker} {escape(model)}")
    console.print()
