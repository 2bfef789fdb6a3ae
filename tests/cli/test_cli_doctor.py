"""Tests for ``yeet doctor``."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from yeet.cli import main
from yeet.cli_commands.doctor import NO_PROVIDER, active_model
from yeet.config.settings import Configuration
from yeet.credentials import SERVICE_NAME, CredentialResolver


@pytest.fixture()
def environ() -> dict[str, str]:
    return {}


@pytest.fixture(autouse=True)
def resolver(
    make_resolver: Callable[..., CredentialResolver], environ: dict[str, str]
) -> Iterator[CredentialResolver]:
    instance = make_resolver(environ)
    with patch("yeet.cli_commands.doctor.CredentialResolver", return_value=instance):
        yield instance


def _write_config(root: Path, text: str) -> None:
    config_dir = root / "config" / "yeet"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.toml").write_text(text)


class TestActiveModel:
    def test_auto_without_keys(self, resolver: CredentialResolver) -> None:
        assert active_model(Configuration.default(), resolver) == NO_PROVIDER

    def test_auto_with_key(self, resolver: CredentialResolver, environ: dict[str, str]) -> None:
        environ["ANTHROPIC_API_KEY"] = "a"
        assert active_model(Configuration.default(), resolver) == "claude-haiku-4-5-20251001"

    def test_named_provider(self, resolver: CredentialResolver) -> None:
        config = Configuration.default()
        config.active_provider = "groq"
        assert active_model(config, resolver) == "llama-3.3-70b-versatile"


class TestDoctor:
    def test_no_keys(self) -> None:
        result = CliRunner().invoke(main, ["doctor"])

        assert result.exit_code == 0, result.output
        assert "Provider" in result.output
        assert "auto" in result.output
        assert NO_PROVIDER in result.output
        assert "no auth needed" in result.output
        assert "No API keys configured." in result.output

    def test_all_good(self, store: Any) -> None:
        store.set(SERVICE_NAME, "openai", "sk")
        result = CliRunner().invoke(main, ["doctor"])

        assert "gpt-4o-mini" in result.output
        assert "Everything looks good." in result.output

    def test_warnings(self, store: Any, isolated_dirs: Path) -> None:
        store.set(SERVICE_NAME, "openai", "sk")
        _write_config(isolated_dirs, 'provider = "nope"\n')
        result = CliRunner().invoke(main, ["doctor"])

        assert "Warnings" in result.output
        assert "unknown provider 'nope'" in result.output
        assert "1 warning(s)" in result.output

    def test_malformed_config(self, isolated_dirs: Path) -> None:
        _write_config(isolated_dirs, "provider = [\n")
        result = CliRunner().invoke(main, ["doctor"])

        assert result.exit_code == 0
        assert "Could not load config" in result.output

    def test_log_alias(self) -> None:
        result = CliRunner().invoke(main, ["log"])

        assert result.exit_code == 0
        assert '"yeet log" is now "yeet doctor".' in result.output
        assert "Keys" in result.output
