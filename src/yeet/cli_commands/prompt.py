"""``yeet prompt`` — view and edit the system prompt."""

from __future__ import annotations

import sys

import click

from yeet.cli_commands._output import console, print_error, print_success
from yeet.engine.prompt import DEFAULT_PROMPT, load_prompt, prompt_path, write_prompt


@click.group("prompt", invoke_without_command=True)
@click.pass_context
def prompt_cmd(ctx: click.Context) -> None:
    """Edit the system prompt used for commit messages."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(edit)


@prompt_cmd.command()
def show() -> None:
    """Print the current prompt."""
    console.print()
    console.print(load_prompt(), markup=False)
    console.print()


@prompt_cmd.command()
def reset() -> None:
    """Restore the built-in prompt."""
    try:
        write_prompt(DEFAULT_PROMPT)
    except OSError as exc:
        print_error(f"failed to reset prompt: {exc}")
        sys.exit(1)
    print_success("Prompt reset to default.")


@prompt_cmd.command()
def edit() -> None:
    """Open the prompt file in $VISUAL / $EDITOR."""
    load_prompt()  # creates the file with the default on first use
    try:
        click.edit(filename=str(prompt_path()))
    except click.ClickException as exc:
        print_error(f"editor exited with error: {exc.format_message()}")
        sys.exit(1)
    print_success("Prompt saved.")
