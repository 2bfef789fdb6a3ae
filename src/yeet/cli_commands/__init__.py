"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from yeet.cli_commands.auth import auth
    from yeet.cli_commands.commit import commit
    from yeet.cli_commands.config import config_cmd
    from yeet.cli_commands.doctor import doctor, log_alias
    from yeet.cli_commands.models import models_cmd
    from yeet.cli_commands.pr import pr
    from yeet.cli_commands.prompt import prompt_cmd

    cli.add_command(commit)
    cli.add_command(pr)
    cli.add_command(auth)
    cli.add_command(config_cmd)
    cli.add_command(prompt_cmd)
    cli.add_command(models_cmd)
    cli.add_command(doctor)
    cli.add_command(log_alias)
