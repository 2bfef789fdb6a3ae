"""User configuration — the ``config.toml`` model and provider resolution.

Provider settings are resolved by overlaying three layers field by field:

1. registry defaults (:mod:`yeet.config.registry`)
2. the typed ``[anthropic]`` / ``[openai]`` / ``[ollama]`` tables
3. ``[custom.<name>]`` tables

A provider that only exists in ``[custom]`` is treated as OpenAI-compatible
and always needs an API key.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from yeet.config.registry import (
    BASELINE_PROVIDERS,
    REGISTRY,
    ProviderRegistry,
    WireProtocol,
)
from yeet.errors import ConfigError
from yeet.paths import config_file

logger = logging.getLogger(__name__)

AUTO = "auto"


class ProviderConfig(BaseModel):
    """Per-provider overrides. Empty fields inherit from the layer below."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    model: str = ""
    url: str = ""
    env_var: str = Field(default="", alias="env")

    def to_toml(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump(by_alias=True).items() if v}


class PricingOverride(BaseModel):
    """USD per million tokens for one model."""

    input: float
    output: float


class ResolvedProvider(BaseModel):
    """Fully merged provider settings, ready to build an adapter from."""

    model_config = ConfigDict(frozen=True)

    name: str
    model: str
    url: str
    env_var: str
    protocol: WireProtocol
    needs_auth: bool


class Configuration(BaseModel):
    """Contents of ``config.toml``. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    active_provider: str = Field(default=AUTO, alias="provider")
    anthropic: ProviderConfig = Field(default_factory=ProviderConfig)
    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    ollama: ProviderConfig = Field(default_factory=ProviderConfig)
    custom: dict[str, ProviderConfig] = Field(default_factory=lambda: dict[str, ProviderConfig]())
    pricing_overrides: dict[str, PricingOverride] = Field(
        default_factory=lambda: dict[str, PricingOverride](), alias="pricing"
    )

    @classmethod
    def default(cls, registry: ProviderRegistry = REGISTRY) -> Configuration:
        """The configuration a fresh install starts with."""
        ollama_url = registry.lookup("ollama")
        return cls(
            active_provider=AUTO,
            anthropic=ProviderConfig(model=registry.default_model("anthropic")),
            openai=ProviderConfig(model=registry.default_model("openai")),
            ollama=ProviderConfig(
                model=registry.default_model("ollama"),
                url=ollama_url.default_url if ollama_url else "",
            ),
        )

    # -- typed slots ---------------------------------------------------------

    def slot(self, name: str) -> ProviderConfig | None:
        """Return the typed table for a baseline provider, else ``None``."""
        if name in BASELINE_PROVIDERS:
            slot: ProviderConfig = getattr(self, name)
            return slot
        return None

    # -- resolution ----------------------------------------------------------

    def resolve_provider(
        self, name: str, registry: ProviderRegistry = REGISTRY
    ) -> ResolvedProvider | None:
        """Merge registry, typed slot and custom table for *name*.

        Returns ``None`` when the provider is unknown, or when the merge
        leaves the model or URL empty.
        """
        entry = registry.lookup(name)
        custom = self.custom.get(name)
        if entry is None and custom is None:
            return None

        merged: dict[str, Any] = {"name": name, "model": "", "url": "", "env_var": ""}
        if entry is not None:
            merged.update(
                model=entry.default_model,
                url=entry.default_url,
                env_var=entry.default_env_var,
                protocol=entry.protocol,
                needs_auth=entry.needs_auth,
            )
        else:
            merged.update(protocol=WireProtocol.OPENAI, needs_auth=True)

        for layer in (self.slot(name), custom):
            if layer is None:
                continue
            for field in ("model", "url", "env_var"):
                value = getattr(layer, field)
                if value:
                    merged[field] = value

        if not merged["model"] or not merged["url"]:
            logger.debug("Provider %s resolved without a model or URL", name)
            return None
        return ResolvedProvider(**merged)

    def all_provider_names(
        self,
        registry: ProviderRegistry = REGISTRY,
        imported: Iterable[str] = (),
    ) -> list[str]:
        """Baseline names first, then every other known name sorted."""
        seen = set(BASELINE_PROVIDERS)
        extra: list[str] = []
        for name in (*self.custom, *registry.names(), *imported):
            if name == AUTO or name in seen:
                continue
            seen.add(name)
            extra.append(name)
        return [*BASELINE_PROVIDERS, *sorted(extra)]

    def env_hints(self, registry: ProviderRegistry = REGISTRY) -> dict[str, str]:
        """Map provider name to the environment variable holding its key."""
        envs: dict[str, str] = {}
        for name in registry.names():
            entry = registry.lookup(name)
            if entry is not None and entry.default_env_var:
                envs[name] = entry.default_env_var
        for name in BASELINE_PROVIDERS:
            slot = self.slot(name)
            if slot is not None and slot.env_var:
                envs[name] = slot.env_var
        for name, pc in self.custom.items():
            if pc.env_var:
                envs[name] = pc.env_var
        return envs

    # -- mutation ------------------------------------------------------------

    def set_model(self, provider: str, model: str, registry: ProviderRegistry = REGISTRY) -> None:
        """Record *model* as the one to use for *provider*."""
        slot = self.slot(provider)
        if slot is not None:
            slot.model = model
            return
        pc = self.custom.setdefault(provider, ProviderConfig())
        pc.model = model
        entry = registry.lookup(provider)
        if entry is not None:
            pc.url = pc.url or entry.default_url
            pc.env_var = pc.env_var or entry.default_env_var

    # -- validation ----------------------------------------------------------

    def validate_settings(self, registry: ProviderRegistry = REGISTRY) -> list[str]:
        """Return human-readable problems. Never raises."""
        problems: list[str] = []
        name = self.active_provider
        if name and name != AUTO and self.resolve_provider(name, registry) is None:
            problems.append(
                f"unknown provider {name!r} — add it to [custom.{name}] in config.toml "
                "or use a known provider"
            )

        for custom_name, pc in self.custom.items():
            if custom_name in registry:
                continue
            if not pc.url:
                problems.append(f"custom provider {custom_name!r} is missing url")
            if not pc.env_var:
                problems.append(
                    f"custom provider {custom_name!r} has no env var set (key must be in keyring)"
                )
        return problems

    # -- serialization -------------------------------------------------------

    def to_toml(self, registry: ProviderRegistry = REGISTRY) -> dict[str, Any]:
        """TOML document for this config.

        Typed-slot models equal to the registry default are left out so that
        a new default model reaches existing users.
        """
        doc: dict[str, Any] = {"provider": self.active_provider}
        for name in BASELINE_PROVIDERS:
            slot: ProviderConfig = getattr(self, name)
            table = slot.to_toml()
            if table.get("model") == registry.default_model(name):
                del table["model"]
            doc[name] = table
        if self.custom:
            doc["custom"] = {name: pc.to_toml() for name, pc in self.custom.items()}
        if self.pricing_overrides:
            doc["pricing"] = {
                model: override.model_dump() for model, override in self.pricing_overrides.items()
            }
        return doc

    @classmethod
    def from_toml(cls, data: dict[str, Any], registry: ProviderRegistry = REGISTRY) -> Configuration:
        """Overlay a parsed TOML document onto the defaults."""
        merged = cls.default(registry).model_dump(by_alias=True)
        for key, value in data.items():
            if key in BASELINE_PROVIDERS and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value
        return cls.model_validate(merged)


def config_path() -> Path:
    return config_file()


def load_config(path: Path | None = None, registry: ProviderRegistry = REGISTRY) -> Configuration:
    """Read ``config.toml``; a missing file yields the defaults."""
    path = path or config_path()
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        return Configuration.default(registry)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(str(path), str(exc)) from exc

    try:
        return Configuration.from_toml(data, registry)
    except ValidationError as exc:
        raise ConfigError(str(path), str(exc)) from exc


def save_config(
    config: Configuration, path: Path | None = None, registry: ProviderRegistry = REGISTRY
) -> Path:
    """Write *config* to ``config.toml`` and return the path written."""
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as fh:
        tomli_w.dump(config.to_toml(registry), fh)
    logger.debug("Saved config to %s", path)
    return path


def ensure_config_file(path: Path | None = None) -> Path:
    """Return the config path, writing the defaults first if it does not exist."""
    path = path or config_path()
    if not path.exists():
        save_config(Configuration.default(), path)
    return path
