"""``yeet pr`` — open a pull/merge request with a generated description."""

from __future__ import annotations

import asyncio
import sys

import click

from yeet.cli_commands._config import load_config_or_warn
from yeet.cli_commands._interactive import Action, edit_external, edit_line, wait_for_action
from yeet.cli_commands._output import (
    MESSAGE_STYLE,
    console,
    print_diff_stat,
    print_dim,
    print_error,
    print_keyhints,
    print_success,
)
from yeet.engine import Engine
from yeet.engine.models import CommitContext
from yeet.engine.prompt import PR_PROMPT
from yeet.errors import ForgeError, YeetError
from yeet.forge import Forge, detect_forge
from yeet.git import Git

PR_MAX_TOKENS = 1024


def parse_pr(raw: str) -> tuple[str, str]:
    """Split generated text into a title (first line) and body (the rest)."""
    title, _, body = raw.strip().partition("\n")
    return title.strip(), body.strip()


def show_preview(title: str, body: str) -> None:
    console.print(f"  # {title}", style=MESSAGE_STYLE, markup=False)
    if body:
        console.print()
        for line in body.splitlines():
            console.print(f"  {line}", style="dim", markup=False)
    console.print()


def confirm_pr(title: str, body: str) -> tuple[str, str] | None:
    """Preview loop. Returns the final title and body, or ``None`` on cancel."""
    while True:
        show_preview(title, body)
        print_keyhints(("enter", "create"), ("e", "edit title"), ("E", "editor"), ("q", "cancel"))
        action = wait_for_action()
        if action == Action.CONFIRM:
            return title, body
        if action == Action.CANCEL:
            return None
        if action == Action.EDIT:
            title = edit_line(title)
        else:
            edited = edit_external(f"{title}\n\n{body}")
            if edited:
                title, body = parse_pr(edited)


async def run_pr(git: Git, forge: Forge | None = None) -> bool:
    """The whole PR flow. Returns ``True`` if a PR was created."""
    forge = forge or await detect_forge(git)

    branch = await git.current_branch()
    base = await git.default_branch()
    if branch == base:
        raise ForgeError(f"already on {base} — switch to a feature branch first")

    if not await git.has_upstream():
        print_dim(f"Pushing {branch} to origin...")
        await git.push_set_upstream()
        print_success(f"pushed to origin/{branch}")

    existing = await forge.existing_pr(branch)
    if existing is not None:
        where = existing or f"for branch {branch}"
        console.print(f"\n  A {forge.name} PR already exists: {where}\n", markup=False)
        return False

    if await git.status_short():
        print_dim("Uncommitted changes detected — run yeet first, then yeet pr.")
        return False

    commits = await git.log_range(base)
    if not commits:
        print_dim(f"No commits between {base} and {branch} — nothing to open a PR for.")
        return False

    diff = await git.diff_range(base)
    print_diff_stat(await git.diff_stat_range(base))

    engine = Engine(load_config_or_warn())
    ctx = CommitContext(
        diff=diff,
        branch=branch,
        recent_commits=commits,
        system_prompt_override=PR_PROMPT,
        max_tokens_override=PR_MAX_TOKENS,
    )
    with console.status("[dim]Generating PR description...[/dim]"):
        result = await engine.generate(ctx)

    confirmed = confirm_pr(*parse_pr(result.text))
    if confirmed is None:
        print_dim("Cancelled.")
        return False

    url = await forge.create_pr(*confirmed, base)
    print_success(f"{forge.name} PR created: {url}")
    if result.usage.reported:
        print_dim(engine.cost_line(result.usage))
    return True


@click.command("pr")
def pr() -> None:
    """Create a pull request with a generated title and description."""
    try:
        asyncio.run(run_pr(Git()))
    except YeetError as exc:
        print_error(exc)
        sys.exit(1)
