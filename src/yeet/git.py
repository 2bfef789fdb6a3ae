"""Git operations, by shelling out to the ``git`` CLI.

Commands run through :func:`run_command`, the same asyncio subprocess
pattern used for the forge CLIs in :mod:`yeet.forge`. Output is stdout and
stderr combined, stripped.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import NamedTuple

from yeet.errors import GitError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_CANDIDATES = ("main", "master")


class CommandResult(NamedTuple):
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(*argv: str, cwd: Path | None = None) -> CommandResult:
    """Run *argv* and capture its combined output."""
    logger.debug("exec: %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=cwd,
        )
        stdout, _ = await proc.communicate()
    except OSError as exc:
        raise GitError(" ".join(argv[:2]), str(exc)) from exc
    output = stdout.decode(errors="replace").strip() if stdout else ""
    return CommandResult(proc.returncode or 0, output)


class Git:
    """The repository in *cwd* (default: the current directory)."""

    def __init__(self, cwd: Path | None = None) -> None:
        self._cwd = cwd

    async def _exec(self, *args: str) -> CommandResult:
        return await run_command("git", *args, cwd=self._cwd)

    async def _run(self, *args: str) -> str:
        result = await self._exec(*args)
        if not result.ok:
            raise GitError(f"git {args[0]}", result.output)
        return result.output

    # -- staging -------------------------------------------------------------

    async def has_staged_changes(self) -> bool:
        # --quiet exits 1 when there are differences.
        result = await self._exec("diff", "--cached", "--quiet")
        return result.returncode == 1 and not result.output

    async def stage_all(self) -> None:
        await self._run("add", "--all")

    async def reset(self) -> None:
        """Unstage everything (keeps the working tree)."""
        await self._run("reset")

    # -- inspection ----------------------------------------------------------

    async def diff_stat(self) -> str:
        return await self._run("diff", "--cached", "--stat")

    async def diff_cached(self) -> str:
        return await self._run("diff", "--cached")

    async def log_oneline(self, count: int = 10) -> str:
        return await self._run("log", "--oneline", f"-{count}")

    async def status_short(self) -> str:
        return await self._run("status", "--short")

    async def current_branch(self) -> str:
        return await self._run("rev-parse", "--abbrev-ref", "HEAD")

    async def default_branch(self) -> str:
        """``origin/HEAD`` if set, else the first of main/master that exists."""
        result = await self._exec("symbolic-ref", "refs/remotes/origin/HEAD")
        if result.ok:
            parts = result.output.split("/", 3)
            if len(parts) == 4:
                return parts[3]
        for name in DEFAULT_BRANCH_CANDIDATES:
            if (await self._exec("rev-parse", "--verify", name)).ok:
                return name
        raise GitError("git symbolic-ref", "could not detect default branch")

    async def has_upstream(self) -> bool:
        result = await self._exec("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")
        return result.ok

    async def remote_url(self, remote: str = "origin") -> str:
        return await self._run("remote", "get-url", remote)

    # -- ranges against a base branch ----------------------------------------

    async def log_range(self, base: str) -> str:
        return await self._run("log", "--oneline", f"{base}..HEAD")

    async def diff_range(self, base: str) -> str:
        return await self._run("diff", f"{base}...HEAD")

    async def diff_stat_range(self, base: str) -> str:
        return await self._run("diff", "--stat", f"{base}...HEAD")

    # -- writing -------------------------------------------------------------

    async def commit(self, message: str) -> str:
        return await self._run("commit", "-m", message)

    async def push(self) -> str:
        return await self._run("push")

    async def push_set_upstream(self) -> str:
        branch = await self.current_branch()
        return await self._run("push", "--set-upstream", "origin", branch)
