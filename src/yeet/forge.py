"""Pull/merge request operations on GitHub (``gh``) and GitLab (``glab``)."""

from __future__ import annotations

import shutil
from typing import Protocol, runtime_checkable

from yeet.errors import ForgeError, GitError
from yeet.git import Git, run_command


@runtime_checkable
class Forge(Protocol):
    """A code host that can open pull requests from the command line."""

    name: str
    cli_name: str

    async def existing_pr(self, branch: str) -> str | None:
        """URL of the open PR for *branch* (``""`` if unknown), or ``None``."""
        ...

    async def create_pr(self, title: str, body: str, base: str) -> str:
        """Open a PR and return its URL."""
        ...


class GitHub:
    name = "GitHub"
    cli_name = "gh"

    async def existing_pr(self, branch: str) -> str | None:
        result = await run_command("gh", "pr", "view", branch, "--json", "url", "--jq", ".url")
        if not result.ok or not result.output:
            return None
        return result.output

    async def create_pr(self, title: str, body: str, base: str) -> str:
        args = ["pr", "create", "--title", title, "--body", body]
        if base:
            args += ["--base", base]
        result = await run_command("gh", *args)
        if not result.ok:
            raise GitError("gh pr create", result.output)
        return result.output


class GitLab:
    name = "GitLab"
    cli_name = "glab"

    async def existing_pr(self, branch: str) -> str | None:
        result = await run_command("glab", "mr", "view", branch)
        if not result.ok or not result.output or "no open merge request" in result.output:
            return None
        for line in result.output.splitlines():
            line = line.strip()
            if line.lower().startswith("url:"):
                return line.split(":", 1)[1].strip()
        return ""

    async def create_pr(self, title: str, body: str, base: str) -> str:
        args = ["mr", "create", "--fill", "--title", title, "--description", body]
        if base:
            args += ["--target-branch", base]
        result = await run_command("glab", *args)
        if not result.ok:
            raise GitError("glab mr create", result.output)
        for line in result.output.splitlines():
            line = line.strip()
            if line.startswith("http"):
                return line
        return result.output


async def detect_forge(git: Git) -> Forge:
    """Pick the forge from the ``origin`` URL and check its CLI is installed."""
    try:
        remote = await git.remote_url("origin")
    except GitError as exc:
        raise ForgeError("no git remote 'origin' found") from exc

    forge: Forge = GitLab() if "gitlab" in remote else GitHub()
    if shutil.which(forge.cli_name) is None:
        msg = f"{forge.name} remote detected but '{forge.cli_name}' CLI is not installed"
        raise ForgeError(msg)
    return forge
