"""``yeet doctor`` — check configuration and provider status."""

from __future__ import annotations

import click
from rich.markup import escape

from yeet.cli_commands._output import console, print_dim, print_key_status
from yeet.config.registry import REGISTRY
from yeet.config.settings import AUTO, Configuration, config_path, load_config
from yeet.credentials import CredentialResolver
from yeet.engine.pricing import PricingTable
from yeet.engine.selector import ProviderSelector
from yeet.errors import ConfigError

NO_PROVIDER = "(no provider available)"


def active_model(config: Configuration, resolver: CredentialResolver) -> str:
    """Model the active provider would use; for ``auto``, the current pick."""
    if config.active_provider == AUTO:
        pricing = PricingTable()
        pricing.apply_overrides(config.pricing_overrides)
        return ProviderSelector(resolver, pricing).auto_model_name(config) or NO_PROVIDER
    provider = config.resolve_provider(config.active_provider)
    return provider.model if provider else ""


def run_doctor(resolver: CredentialResolver | None = None) -> None:
    resolver = resolver or CredentialResolver()
    console.print()
    try:
        config = load_config()
    except ConfigError as exc:
        config = Configuration.default()
        console.print(f"  [red]! Could not load config: {escape(str(exc))}[/red]\n")

    console.print(f"  [bold]Provider[/bold]  {escape(config.active_provider)}")
    console.print(f"  [bold]Model[/bold]     {escape(active_model(config, resolver))}")
    console.print(f"  [bold]Config[/bold]    [dim]{escape(str(config_path()))}[/dim]")

    problems = config.validate_settings()
    if problems:
        console.print("\n  [bold]Warnings[/bold]\n")
        for problem in problems:
            console.print(f"  [red]![/red] {escape(problem)}")

    providers = config.all_provider_names(imported=resolver.list_imported_providers())
    hints = config.env_hints()
    status = resolver.status(providers, hints)

    console.print("\n  [bold]Keys[/bold]\n")
    print_key_status(providers, status, registry=REGISTRY, env_hints=hints)
    console.print()

    if not any(credential.found for credential in status.values()):
        print_dim("No API keys configured. Run yeet auth set <provider> to get started.")
    elif not problems:
        console.print("  [green]✓[/green] Everything looks good.")
    else:
        console.print(f"  [red]{len(problems)} warning(s) — see above.[/red]")
    console.print()


@click.command()
def doctor() -> None:
    """Check configuration and provider status."""
    run_doctor()


@click.command("log", hidden=True)
def log_alias() -> None:
    """Old name for ``yeet doctor``."""
    print_dim('"yeet log" is now "yeet doctor".')
    run_doctor()
