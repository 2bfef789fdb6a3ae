"""Tests for the static provider registry."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from yeet.config.registry import (
    BASELINE_PROVIDERS,
    KNOWN_PROVIDERS,
    REGISTRY,
    ProviderEntry,
    ProviderRegistry,
    WireProtocol,
    build_default_registry,
)


class TestProviderRegistry:
    def test_lookup_known(self) -> None:
        entry = REGISTRY.lookup("anthropic")
        assert entry is not None
        assert entry.protocol == WireProtocol.ANTHROPIC
        assert entry.default_env_var == "ANTHROPIC_API_KEY"

    def test_lookup_missing_returns_none(self) -> None:
        assert REGISTRY.lookup("nope") is None

    def test_baseline_providers_present(self) -> None:
        protocols = {REGISTRY.lookup(name).protocol for name in BASELINE_PROVIDERS}  # type: ignore[union-attr]
        assert protocols == set(WireProtocol)

    @pytest.mark.parametrize("name", ["google", "groq", "openrouter", "mistral"])
    def test_aggregators_are_openai_compatible(self, name: str) -> None:
        entry = REGISTRY.lookup(name)
        assert entry is not None
        assert entry.protocol == WireProtocol.OPENAI
        assert entry.needs_auth

    def test_ollama_needs_no_auth(self) -> None:
        entry = REGISTRY.lookup("ollama")
        assert entry is not None
        assert entry.needs_auth is False
        assert entry.default_url == "http://localhost:11434"
        assert entry.default_env_var == ""

    def test_names_keep_registration_order(self) -> None:
        assert REGISTRY.names() == list(KNOWN_PROVIDERS)

    def test_keys_are_lowercase(self) -> None:
        registry = ProviderRegistry(
            {
                "Custom": ProviderEntry(
                    name="custom",
                    default_model="m",
                    default_url="http://x",
                    protocol=WireProtocol.OPENAI,
                )
            }
        )
        assert "custom" in registry
        assert registry.names() == ["custom"]

    def test_registry_is_read_only(self) -> None:
        registry = build_default_registry()
        with pytest.raises(TypeError):
            registry._entries["new"] = KNOWN_PROVIDERS["openai"]  # type: ignore[index]

    def test_entries_are_frozen(self) -> None:
        entry = REGISTRY.lookup("openai")
        assert entry is not None
        with pytest.raises(ValidationError):
            entry.default_model = "other"  # type: ignore[misc]

    def test_default_model(self) -> None:
        assert REGISTRY.default_model("openai") == "gpt-4o-mini"
        assert REGISTRY.default_model("missing") == ""

    def test_len(self) -> None:
        assert len(REGISTRY) == len(KNOWN_PROVIDERS)
