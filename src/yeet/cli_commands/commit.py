"""``yeet [MESSAGE...]`` — stage, commit and push in one step."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable
from typing import NamedTuple

import click
from keyring.errors import KeyringError
from rich.status import Status

from yeet.cli_commands._config import load_config_or_warn
from yeet.cli_commands._interactive import (
    Action,
    edit_external,
    edit_line,
    read_manual_message,
    wait_for_action,
)
from yeet.cli_commands._output import (
    MESSAGE_STYLE,
    console,
    print_diff_stat,
    print_dim,
    print_error,
    print_keyhints,
    print_message,
    print_success,
)
from yeet.engine import Engine
from yeet.engine.models import CommitContext, Usage
from yeet.errors import GenerationError, GitError, MissingCredentialError, YeetError
from yeet.git import Git

logger = logging.getLogger(__name__)


class Draft(NamedTuple):
    """A message to confirm, plus the usage and engine that produced it."""

    message: str
    usage: Usage | None = None
    engine: Engine | None = None
    streamed: bool = False


class StreamPrinter:
    """``on_token`` callback: stops the spinner, then echoes tokens inline."""

    def __init__(self, status: Status) -> None:
        self._status = status
        self.started = False

    def __call__(self, chunk: str) -> None:
        if not self.started:
            self._status.stop()
            console.print("  › ", end="", style=MESSAGE_STYLE)
            self.started = True
        console.print(chunk, end="", style=MESSAGE_STYLE, markup=False, soft_wrap=True)

    def finish(self) -> None:
        self._status.stop()
        if self.started:
            console.print()


async def _optional(pending: Awaitable[str]) -> str:
    try:
        return await pending
    except GitError as exc:
        logger.debug("Skipping optional git context: %s", exc)
        return ""


async def collect_context(git: Git) -> CommitContext:
    """Staged diff plus branch, recent log and status for the prompt."""
    diff = await git.diff_cached()
    return CommitContext(
        diff=diff,
        branch=await _optional(git.current_branch()),
        recent_commits=await _optional(git.log_oneline()),
        status=await _optional(git.status_short()),
    )


def _quick_setup(engine: Engine, provider: str) -> bool:
    """Offer to store a key for *provider*; ``True`` if one was saved."""
    if not click.confirm(f"  Set up an API key for {provider} now?", default=True):
        return False
    key = click.prompt(f"  API key for {provider}", hide_input=True, default="", show_default=False)
    key = key.strip()
    if not key:
        print_error("empty key, nothing saved")
        return False
    try:
        engine.resolver.save(provider, key)
    except KeyringError as exc:
        print_error(f"failed to save key: {exc}")
        return False
    print_success(f"Key saved for {provider}.")
    return True


async def generate_or_fallback(git: Git) -> Draft:
    """Generate a message, or ask for one when generation is not possible."""
    engine = Engine(load_config_or_warn())

    try:
        selection = engine.select()
    except MissingCredentialError as exc:
        print_error(exc)
        if not _quick_setup(engine, exc.provider):
            return _manual(exc.provider)
        selection = engine.select()
    except YeetError as exc:
        print_error(exc)
        return _manual(engine.config.active_provider)

    ctx = await collect_context(git)
    provider = selection.provider
    with console.status(f"[dim]Generating with {provider.model}...[/dim]") as status:
        printer = StreamPrinter(status)
        try:
            result = await engine.generate(ctx, on_token=printer, selection=selection)
        except GenerationError as exc:
            printer.finish()
            print_error(f"{provider.name} ({provider.model}): {exc}")
            return Draft(read_manual_message())
        printer.finish()

    return Draft(result.text, result.usage, engine, streamed=printer.started)


def _manual(provider: str) -> Draft:
    message = read_manual_message()
    if provider and provider != "auto":
        print_dim(f"tip: run `yeet auth set {provider}` to enable AI commit messages")
    return Draft(message)


def confirm_message(message: str, *, show: bool = True) -> str | None:
    """Confirm loop. Returns the final message, or ``None`` on cancel."""
    while True:
        if show:
            print_message(message)
        else:
            console.print()
        show = True
        print_keyhints(("enter", "commit"), ("e", "edit"), ("E", "editor"), ("esc", "cancel"))

        action = wait_for_action()
        if action == Action.CONFIRM:
            return message
        if action == Action.CANCEL:
            return None
        if action == Action.EDIT:
            message = edit_line(message)
        else:
            message = edit_external(message) or message


async def push(git: Git) -> None:
    """``git push``, retrying with ``--set-upstream origin <branch>``."""
    try:
        await git.push()
    except GitError as exc:
        logger.debug("Plain push failed (%s); retrying with --set-upstream", exc)
        await git.push_set_upstream()


async def run_commit(git: Git, message: str = "") -> bool:
    """The whole commit flow. Returns ``False`` if nothing was committed."""
    auto_staged = False
    if not await git.has_staged_changes():
        await git.stage_all()
        auto_staged = True

    stat = await git.diff_stat()
    if not stat:
        print_dim("Nothing to commit.")
        return False
    print_diff_stat(stat)

    draft = Draft(message) if message else await generate_or_fallback(git)

    final = confirm_message(draft.message, show=not draft.streamed)
    if final is None:
        console.print()
        if auto_staged:
            await git.reset()
        print_dim("Cancelled.")
        return False

    output = await git.commit(final)
    print_success(output.splitlines()[0] if output else "committed")

    await push(git)
    branch = await _optional(git.current_branch())
    print_success(f"pushed to origin/{branch}" if branch else "pushed")

    if draft.usage is not None and draft.usage.reported and draft.engine is not None:
        print_dim(draft.engine.cost_line(draft.usage))
    return True


@click.command("commit")
@click.argument("words", nargs=-1)
@click.option(
    "--message",
    "-m",
    default=None,
    help="Commit message (use when it collides with a subcommand name).",
)
def commit(words: tuple[str, ...], message: str | None) -> None:
    """Stage all changes, write a commit message and push."""
    text = message or " ".join(words)
    try:
        asyncio.run(run_commit(Git(), text.strip()))
    except YeetError as exc:
        print_error(exc)
        sys.exit(1)
