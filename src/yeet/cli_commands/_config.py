"""Config loading shared by the commands."""

from __future__ import annotations

import sys

from rich.markup import escape

from yeet.cli_commands._output import console, print_error
from yeet.config.settings import Configuration, load_config
from yeet.errors import ConfigError


def load_config_or_warn() -> Configuration:
    """Load ``config.toml``, falling back to the defaults with a warning.

    For commands that only read the config.
    """
    try:
        return load_config()
    except ConfigError as exc:
        console.print(f"  [yellow]! Could not load config:[/yellow] {escape(str(exc))}")
        return Configuration.default()


def load_config_or_exit() -> Configuration:
    """Load ``config.toml`` or exit; for commands that write it back."""
    try:
        return load_config()
    except ConfigError as exc:
        print_error(exc)
        sys.exit(1)
