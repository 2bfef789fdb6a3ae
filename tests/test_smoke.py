"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations

from click.testing import CliRunner


def test_import() -> None:
    import yeet

    assert yeet.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from yeet.cli import main

    assert callable(main)


def test_engine_imports() -> None:
    from yeet.engine import CommitContext, Engine, GenerationResult, Selection, Usage
    from yeet.engine.adapters import (
        AnthropicAdapter,
        GenerationAdapter,
        OllamaAdapter,
        OpenAIAdapter,
        StreamingAdapter,
    )

    assert Engine is not None
    assert CommitContext is not None
    assert GenerationResult is not None
    assert Selection is not None
    assert Usage is not None
    assert GenerationAdapter is not None
    assert StreamingAdapter is not None
    assert AnthropicAdapter is not None
    assert OpenAIAdapter is not None
    assert OllamaAdapter is not None


def test_lazy_import_from_yeet() -> None:
    import yeet

    assert yeet.Engine is not None


def test_version_flag() -> None:
    from yeet.cli import main

    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_help_lists_subcommands() -> None:
    from yeet.cli import main

    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    for name in ("pr", "auth", "config", "prompt", "models", "doctor"):
        assert name in result.output


def test_trace_without_sdk() -> None:
    from unittest.mock import patch

    from yeet.cli import main

    error = ImportError("opentelemetry-sdk is required")
    with patch("yeet.utils.telemetry.configure_telemetry", side_effect=error):
        result = CliRunner().invoke(main, ["--trace", "doctor"])
    assert result.exit_code == 1
    assert "opentelemetry-sdk" in result.output
