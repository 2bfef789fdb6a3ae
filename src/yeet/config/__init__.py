"""Provider registry and user configuration."""

from yeet.config.registry import (
    BASELINE_PROVIDERS,
    KNOWN_MODELS,
    REGISTRY,
    ProviderEntry,
    ProviderRegistry,
    WireProtocol,
    build_default_registry,
)
from yeet.config.settings import (
    AUTO,
    Configuration,
    PricingOverride,
    ProviderConfig,
    ResolvedProvider,
    config_path,
    ensure_config_file,
    load_config,
    save_config,
)

__all__ = [
    "AUTO",
    "BASELINE_PROVIDERS",
    "KNOWN_MODELS",
    "REGISTRY",
    "Configuration",
    "PricingOverride",
    "ProviderConfig",
    "ProviderEntry",
    "ProviderRegistry",
    "ResolvedProvider",
    "WireProtocol",
    "build_default_registry",
    "config_path",
    "ensure_config_file",
    "load_config",
    "save_config",
]
