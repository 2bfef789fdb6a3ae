"""Shared CLI output formatters."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from yeet.config.registry import ProviderRegistry  # noqa: TC001
from yeet.credentials import Credential, CredentialSource

console = Console(highlight=False)

MESSAGE_STYLE = "bold #FF8C42"

# "  file.py | 29 ++---"
_DIFF_STAT_RE = re.compile(r"^(.*\|[^+-]*?)(\+*)(-*)$")


def colorize_diff_stat(line: str) -> Text:
    """Colour one ``git diff --stat`` line: ``+`` green, ``-`` red, summary dim."""
    if "files changed" in line or "file changed" in line:
        return Text(line, style="dim")

    match = _DIFF_STAT_RE.match(line)
    if match is None:
        return Text(line)

    prefix, plus, minus = match.groups()
    text = Text(prefix)
    if plus:
        text.append(plus, style="green")
    if minus:
        text.append(minus, style="red")
    return text


def print_diff_stat(stat: str) -> None:
    console.print()
    for line in stat.splitlines():
        console.print(Text("  ") + colorize_diff_stat(line))
    console.print()


def print_message(message: str) -> None:
    """Show a commit message (or PR title) the way it will be used."""
    console.print(Text(f"  › {message}", style=MESSAGE_STYLE))
    console.print()


def print_keyhints(*hints: tuple[str, str]) -> None:
    parts = [f"[bold]{escape(key)}[/bold][dim] {escape(desc)}[/dim]" for key, desc in hints]
    console.print("  " + "[dim]  ·  [/dim]".join(parts))


def print_success(message: str) -> None:
    console.print(f"  [green]✓[/green] {escape(message)}")


def print_error(message: object) -> None:
    console.print(f"  [red]{escape(str(message))}[/red]")


def print_dim(message: str) -> None:
    console.print(Text(f"  {message}", style="dim"))


def print_key_status(
    providers: Iterable[str],
    status: Mapping[str, Credential],
    *,
    registry: ProviderRegistry | None = None,
    env_hints: Mapping[str, str] | None = None,
    import_hint: bool = False,
) -> None:
    """Table of providers and where (or whether) a key was found.

    With *registry*, providers that need no auth are shown as such. With
    *env_hints*, missing keys list the environment variable to set.
    """
    table = Table(box=None, show_header=False, pad_edge=False, padding=(0, 2, 0, 2))
    table.add_column(width=1)
    table.add_column(style="bold")
    table.add_column(style="dim")

    for name in providers:
        entry = registry.lookup(name) if registry is not None else None
        credential = status.get(name)
        if entry is not None and not entry.needs_auth:
            table.add_row("[dim]·[/dim]", name, "no auth needed")
        elif credential is not None and credential.found:
            detail = credential.source.value
            if import_hint and credential.source != CredentialSource.KEYRING:
                detail += f"  ← yeet auth import {name}"
            table.add_row("[green]✓[/green]", name, escape(detail))
        else:
            hint = f"yeet auth set {name}"
            if env_hints and env_hints.get(name):
                hint = f"{env_hints[name]} or {hint}"
            table.add_row("[red]✗[/red]", name, escape(f"not found  ← {hint}"))

    console.print(table)
