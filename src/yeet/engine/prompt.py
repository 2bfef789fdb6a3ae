"""System prompts — the user's editable prompt file and the built-in defaults."""

from __future__ import annotations

import logging
from pathlib import Path

from yeet.paths import prompt_file

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = """You are a commit message generator. Given git context, generate a single conventional commit message.

Rules:
- Use conventional commit format: type(scope): description
- Types: feat, fix, refactor, docs, style, test, chore, build, ci, perf
- Scope is optional, use it when changes are focused on one area
- Description should be lowercase, imperative mood, no period at the end
- Keep the message under 72 characters
- Prefer to explain WHY something was done from an end user perspective instead of WHAT was done
- Be specific about what user-facing changes were made — avoid generic messages
- Match the style and language of the recent commits when provided
- Use the branch name as a hint for type and scope when relevant
- Return ONLY the commit message, nothing else — no quotes, no explanation"""

PR_PROMPT = """You are a pull request description generator. Given the commits and diff of a branch, write a pull request title and body.

Rules:
- The first line is the title: short, imperative mood, no period, under 72 characters
- Leave one blank line after the title
- The body explains what changed and why, for a reviewer who has not seen the branch
- Use short markdown bullet points for separate changes
- Mention breaking changes or migration steps explicitly
- Do not invent changes that are not in the diff
- Return ONLY the title and body, nothing else — no quotes, no code fences"""


def prompt_path() -> Path:
    return prompt_file()


def write_prompt(content: str, path: Path | None = None) -> Path:
    """Overwrite the prompt file with *content*."""
    path = path or prompt_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n", encoding="utf-8")
    return path


def load_prompt(path: Path | None = None) -> str:
    """Read the user's prompt, creating the file with the default if missing.

    A blank file also yields the default.
    """
    path = path or prompt_path()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        try:
            write_prompt(DEFAULT_PROMPT, path)
        except OSError as exc:
            logger.warning("Could not create prompt file %s: %s", path, exc)
        return DEFAULT_PROMPT
    except OSError as exc:
        logger.warning("Could not read prompt file %s: %s", path, exc)
        return DEFAULT_PROMPT

    text = text.strip()
    return text or DEFAULT_PROMPT
