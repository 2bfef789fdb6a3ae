"""Static provider registry.

Contains the known providers with their defaults and wire protocol, and
a read-only ``ProviderRegistry`` built from them.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict


class WireProtocol(str, Enum):
    """API protocol a provider speaks."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OLLAMA = "ollama"


class ProviderEntry(BaseModel):
    """Static defaults for a known provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    default_model: str
    default_url: str
    default_env_var: str = ""
    protocol: WireProtocol
    needs_auth: bool = True


# The three providers that have typed slots in the config file.
BASELINE_PROVIDERS: tuple[str, ...] = ("anthropic", "openai", "ollama")

DEFAULT_OLLAMA_URL = "http://localhost:11434"

# ---------------------------------------------------------------------------
# Known providers
# ---------------------------------------------------------------------------

KNOWN_PROVIDERS: dict[str, ProviderEntry] = {
    "anthropic": ProviderEntry(
        name="anthropic",
        default_model="claude-haiku-4-5-20251001",
        default_url="https://api.anthropic.com/v1",
        default_env_var="ANTHROPIC_API_KEY",
        protocol=WireProtocol.ANTHROPIC,
    ),
    "openai": ProviderEntry(
        name="openai",
        default_model="gpt-4o-mini",
        default_url="https://api.openai.com/v1",
        default_env_var="OPENAI_API_KEY",
        protocol=WireProtocol.OPENAI,
    ),
    "ollama": ProviderEntry(
        name="ollama",
        default_model="llama3",
        default_url=DEFAULT_OLLAMA_URL,
        protocol=WireProtocol.OLLAMA,
        needs_auth=False,
    ),
    # OpenAI-compatible aggregators
    "google": ProviderEntry(
        name="google",
        default_model="gemini-3-flash-preview",
        default_url="https://generativelanguage.googleapis.com/v1beta/openai",
        default_env_var="GOOGLE_API_KEY",
        protocol=WireProtocol.OPENAI,
    ),
    "groq": ProviderEntry(
        name="groq",
        default_model="llama-3.3-70b-versatile",
        default_url="https://api.groq.com/openai/v1",
        default_env_var="GROQ_API_KEY",
        protocol=WireProtocol.OPENAI,
    ),
    "openrouter": ProviderEntry(
        name="openrouter",
        default_model="openrouter/auto",
        default_url="https://openrouter.ai/api/v1",
        default_env_var="OPENROUTER_API_KEY",
        protocol=WireProtocol.OPENAI,
    ),
    "mistral": ProviderEntry(
        name="mistral",
        default_model="mistral-small-latest",
        default_url="https://api.mistral.ai/v1",
        default_env_var="MISTRAL_API_KEY",
        protocol=WireProtocol.OPENAI,
    ),
}

# Model suggestions per provider, shown by ``yeet config``.
KNOWN_MODELS: dict[str, tuple[str, ...]] = {
    "anthropic": ("claude-haiku-4-5-20251001", "claude-sonnet-4-6", "claude-opus-4-6"),
    "openai": ("gpt-4o-mini", "gpt-4.1-nano", "gpt-4.1-mini", "gpt-4.1", "gpt-4o", "o4-mini"),
    "ollama": ("llama3", "llama3.1", "gemma2", "mistral", "codellama", "qwen2.5-coder"),
    "google": ("gemini-3-flash-preview", "gemini-2.5-flash"),
    "groq": ("llama-3.3-70b-versatile", "llama-3.1-8b-instant", "openai/gpt-oss-20b"),
    "openrouter": ("openrouter/auto", "google/gemini-3-flash-preview", "openai/gpt-4o-mini"),
    "mistral": ("mistral-small-latest", "mistral-large-latest", "codestral-latest"),
}


class ProviderRegistry:
    """Read-only mapping of provider names to their static defaults."""

    def __init__(self, entries: Mapping[str, ProviderEntry]) -> None:
        self._entries: Mapping[str, ProviderEntry] = MappingProxyType(
            {name.lower(): entry for name, entry in entries.items()}
        )

    def lookup(self, name: str) -> ProviderEntry | None:
        """Return the entry for *name*, or ``None`` if it is not registered."""
        return self._entries.get(name)

    def names(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._entries)

    def default_model(self, name: str) -> str:
        entry = self.lookup(name)
        return entry.default_model if entry else ""

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def build_default_registry() -> ProviderRegistry:
    """Return a ``ProviderRegistry`` holding the known providers."""
    return ProviderRegistry(KNOWN_PROVIDERS)


REGISTRY = build_default_registry()
