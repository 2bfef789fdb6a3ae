"""``yeet config`` — show and change ``config.toml``."""

from __future__ import annotations

import sys

import click
import tomli_w

from yeet.cli_commands._config import load_config_or_exit, load_config_or_warn
from yeet.cli_commands._output import console, print_error, print_success
from yeet.config.registry import BASELINE_PROVIDERS, KNOWN_MODELS
from yeet.config.settings import AUTO, config_path, ensure_config_file, save_config
from yeet.errors import UnknownProviderError


@click.group("config", invoke_without_command=True)
@click.pass_context
def config_cmd(ctx: click.Context) -> None:
    """Show or change the yeet configuration."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)


@config_cmd.command()
def show() -> None:
    """Print the effective configuration."""
    config = load_config_or_warn()
    console.print(f"\n  [bold]Config[/bold]  [dim]{config_path()}[/dim]\n")
    console.print(tomli_w.dumps(config.to_toml()), markup=False)

    for name in BASELINE_PROVIDERS:
        provider = config.resolve_provider(name)
        if provider is not None:
            console.print(f"  {name:<10} [dim]{provider.model} @ {provider.url}[/dim]")
    for name in config.custom:
        provider = config.resolve_provider(name)
        if provider is not None and name not in BASELINE_PROVIDERS:
            console.print(f"  {name:<10} [dim]{provider.model} @ {provider.url}[/dim]")
    console.print()


@config_cmd.command()
def path() -> None:
    """Print the path of config.toml."""
    click.echo(str(config_path()))


@config_cmd.command()
def edit() -> None:
    """Open config.toml in $VISUAL / $EDITOR."""
    file = ensure_config_file()
    try:
        click.edit(filename=str(file))
    except click.ClickException as exc:
        print_error(f"editor exited with error: {exc.format_message()}")
        sys.exit(1)
    print_success("Config saved.")


@config_cmd.command("set-provider")
@click.argument("name")
def set_provider(name: str) -> None:
    """Make NAME the active provider ("auto" picks the cheapest with a key)."""
    config = load_config_or_exit()
    name = name.lower()
    if name != AUTO and config.resolve_provider(name) is None:
        print_error(UnknownProviderError(name))
        sys.exit(1)
    config.active_provider = name
    save_config(config)
    print_success(f"Provider set to {name}.")


@config_cmd.command("set-model")
@click.argument("provider")
@click.argument("model")
def set_model(provider: str, model: str) -> None:
    """Use MODEL for PROVIDER."""
    config = load_config_or_exit()
    provider = provider.lower()
    if provider == AUTO or config.resolve_provider(provider) is None:
        print_error(UnknownProviderError(provider))
        sys.exit(1)
    config.set_model(provider, model)
    save_config(config)
    print_success(f"{provider} model set to {model}.")

    suggestions = KNOWN_MODELS.get(provider, ())
    if suggestions and model not in suggestions:
        console.print(f"  [dim]Known models: {', '.join(suggestions)}[/dim]")
