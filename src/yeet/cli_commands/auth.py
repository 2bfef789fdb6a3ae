"""``yeet auth`` — manage API keys in the platform keyring."""

from __future__ import annotations

import sys

import click
from keyring.errors import KeyringError

from yeet.cli_commands._config import load_config_or_warn
from yeet.cli_commands._output import console, print_dim, print_error, print_key_status, print_success
from yeet.config.settings import Configuration
from yeet.credentials import CredentialResolver, CredentialSource


def _providers(config: Configuration, resolver: CredentialResolver) -> list[str]:
    return config.all_provider_names(imported=resolver.list_imported_providers())


def _checked_provider(name: str, config: Configuration, resolver: CredentialResolver) -> str:
    provider = name.lower()
    valid = _providers(config, resolver)
    if provider not in valid:
        print_error(f"unknown provider: {provider} (valid: {', '.join(valid)})")
        sys.exit(1)
    return provider


@click.group(invoke_without_command=True)
@click.pass_context
def auth(ctx: click.Context) -> None:
    """Manage API keys (shows key status by default)."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(status)


@auth.command()
def status() -> None:
    """Show which providers have a key, and where it comes from."""
    config = load_config_or_warn()
    resolver = CredentialResolver()
    providers = _providers(config, resolver)
    hints = config.env_hints()

    console.print("\n  [bold]API Keys[/bold]\n")
    print_key_status(providers, resolver.status(providers, hints), import_hint=True)
    console.print()


@auth.command("set")
@click.argument("provider")
def set_key(provider: str) -> None:
    """Store an API key for PROVIDER in the keyring."""
    config = load_config_or_warn()
    resolver = CredentialResolver()
    provider = _checked_provider(provider, config, resolver)

    key: str = click.prompt(
        f"  Enter API key for {provider}", hide_input=True, default="", show_default=False
    )
    key = key.strip()
    if not key:
        print_error("empty key, nothing saved")
        sys.exit(1)

    try:
        resolver.save(provider, key)
    except KeyringError as exc:
        print_error(f"failed to save key: {exc}")
        sys.exit(1)
    print_success(f"API key for {provider} saved to keyring.")


@auth.command()
@click.argument("provider")
def delete(provider: str) -> None:
    """Remove the stored API key for PROVIDER."""
    config = load_config_or_warn()
    resolver = CredentialResolver()
    provider = _checked_provider(provider, config, resolver)

    try:
        removed = resolver.remove(provider)
    except KeyringError as exc:
        print_error(f"failed to delete key: {exc}")
        sys.exit(1)
    if removed:
        print_success(f"API key for {provider} removed from keyring.")
    else:
        print_dim(f"No key for {provider} in keyring.")


@auth.command("import")
@click.argument("provider", required=False)
def import_keys(provider: str | None) -> None:
    """Copy keys found in the environment or the imported store into the keyring."""
    config = load_config_or_warn()
    resolver = CredentialResolver()
    hints = config.env_hints()

    if provider:
        targets = [_checked_provider(provider, config, resolver)]
    else:
        targets = _providers(config, resolver)

    imported = 0
    for name in targets:
        credential = resolver.resolve(name, hints.get(name, ""))
        if not credential.found:
            if provider:
                console.print(f"  [red]✗[/red] {name}: no key found to import")
            continue
        if credential.source == CredentialSource.KEYRING:
            if provider:
                console.print(f"  [dim]·[/dim] {name}: already in keyring")
            continue
        try:
            resolver.save(name, credential.value)
        except KeyringError as exc:
            console.print(f"  [red]✗[/red] {name}: failed to import: {exc}")
            continue
        print_success(f"{name}: imported from {credential.source.value} to keyring")
        imported += 1

    if not provider and imported == 0:
        print_dim("Nothing to import.")


@auth.command()
def reset() -> None:
    """Remove every yeet key from the keyring."""
    config = load_config_or_warn()
    resolver = CredentialResolver()

    deleted = 0
    for name in _providers(config, resolver):
        try:
            removed = resolver.remove(name)
        except KeyringError as exc:
            print_error(f"{name}: {exc}")
            continue
        if removed:
            print_success(f"{name} removed")
            deleted += 1
    if deleted == 0:
        print_dim("No keys in keyring.")
