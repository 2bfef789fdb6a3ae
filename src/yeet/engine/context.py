"""Request assembly shared by every adapter."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel

from yeet.engine.models import CommitContext
from yeet.engine.prompt import load_prompt

MAX_DIFF_LINES = 8000
DEFAULT_MAX_TOKENS = 256
TRUNCATION_MARKER = "... (diff truncated)"


class PreparedPrompt(BaseModel):
    """System prompt, user message and token cap for one request."""

    system: str
    user: str
    max_tokens: int


def truncate_diff(diff: str, max_lines: int = MAX_DIFF_LINES) -> str:
    """Cut *diff* after its ``max_lines``-th newline and append a marker.

    Diffs with ``max_lines`` newlines or fewer are returned unchanged. The cut
    is newline-aligned, so no line is split.
    """
    if diff.count("\n") <= max_lines:
        return diff
    idx = -1
    for _ in range(max_lines):
        idx = diff.index("\n", idx + 1)
    return diff[: idx + 1] + TRUNCATION_MARKER


def build_user_message(ctx: CommitContext) -> str:
    """Assemble the user message from whichever context fields are set."""
    parts: list[str] = []
    if ctx.branch:
        parts.append(f"Branch: {ctx.branch}\n\n")
    if ctx.status:
        parts.append(f"Files changed:\n{ctx.status}\n\n")
    if ctx.recent_commits:
        parts.append(f"Recent commits:\n{ctx.recent_commits}\n\n")
    if ctx.diff:
        parts.append(f"Diff:\n{truncate_diff(ctx.diff)}")
    return "".join(parts)


def effective_system_prompt(ctx: CommitContext, loader: Callable[[], str] = load_prompt) -> str:
    return ctx.system_prompt_override or loader()


def effective_max_tokens(ctx: CommitContext) -> int:
    if ctx.max_tokens_override > 0:
        return ctx.max_tokens_override
    return DEFAULT_MAX_TOKENS


def prepare(ctx: CommitContext, loader: Callable[[], str] = load_prompt) -> PreparedPrompt:
    """Resolve prompt, user message and token cap for *ctx*."""
    return PreparedPrompt(
        system=effective_system_prompt(ctx, loader),
        user=build_user_message(ctx),
        max_tokens=effective_max_tokens(ctx),
    )
