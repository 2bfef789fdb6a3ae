"""Single-key confirm prompts and message editing."""

from __future__ import annotations

import logging
from enum import Enum

import click

from yeet.cli_commands._output import MESSAGE_STYLE, console, print_error

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CONFIRM = "confirm"
    EDIT = "edit"
    EDIT_EXTERNAL = "edit_external"
    CANCEL = "cancel"


KEY_ACTIONS: dict[str, Action] = {
    "\r": Action.CONFIRM,
    "\n": Action.CONFIRM,
    "e": Action.EDIT,
    "E": Action.EDIT_EXTERNAL,
    "q": Action.CANCEL,
    "\x1b": Action.CANCEL,
}


def wait_for_action() -> Action:
    """Block until a recognised key is pressed.

    Ctrl-C and end of input count as cancel.
    """
    while True:
        try:
            key = click.getchar()
        except (KeyboardInterrupt, EOFError):
            return Action.CANCEL
        if key == "":
            return Action.CANCEL
        action = KEY_ACTIONS.get(key)
        if action is not None:
            return action
        logger.debug("Ignoring key %r", key)


def edit_line(current: str) -> str:
    """Edit *current* inline; an empty answer keeps it."""
    edited: str = click.prompt(
        click.style("  ›", bold=True), default=current, show_default=False
    )
    return edited.strip() or current


def edit_external(text: str) -> str | None:
    """Open *text* in ``$VISUAL``/``$EDITOR``; ``None`` if nothing usable came back."""
    try:
        edited = click.edit(text)
    except click.ClickException as exc:
        print_error(f"Editor failed: {exc.format_message()}")
        return None
    if edited is None:
        return None
    return edited.strip() or None


def read_manual_message() -> str:
    """Ask for a message by hand. Raises ``click.Abort`` when left empty."""
    console.print("  Enter commit message:", style=MESSAGE_STYLE)
    message: str = click.prompt(click.style("  ›", bold=True), default="", show_default=False)
    message = message.strip()
    if not message:
        print_error("empty commit message")
        raise click.Abort
    return message
