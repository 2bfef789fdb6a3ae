"""Tests for the user prompt file."""

from __future__ import annotations

from typing import TYPE_CHECKING

from yeet.engine.prompt import DEFAULT_PROMPT, load_prompt, prompt_path, write_prompt

if TYPE_CHECKING:
    from pathlib import Path


class TestLoadPrompt:
    def test_missing_file_is_created_with_default(self) -> None:
        path = prompt_path()
        assert not path.exists()
        assert load_prompt() == DEFAULT_PROMPT
        assert path.read_text(encoding="utf-8").strip() == DEFAULT_PROMPT

    def test_blank_file_yields_default(self, tmp_path: Path) -> None:
        path = tmp_path / "prompt.txt"
        path.write_text("  \n\n")
        assert load_prompt(path) == DEFAULT_PROMPT

    def test_custom_prompt(self, tmp_path: Path) -> None:
        path = write_prompt("Write haiku commits.", tmp_path / "prompt.txt")
        assert load_prompt(path) == "Write haiku commits."

    def test_prompt_path_under_config_dir(self, isolated_dirs: Path) -> None:
        assert prompt_path() == isolated_dirs / "config" / "yeet" / "prompt.txt"
