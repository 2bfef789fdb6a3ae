"""Chooses the provider a generation runs against.

``provider = "auto"`` picks the cheapest provider (by input price) that has
a usable credential; any other value is resolved directly.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from yeet.config.registry import REGISTRY, ProviderRegistry, WireProtocol
from yeet.config.settings import AUTO, Configuration, ResolvedProvider
from yeet.credentials import CredentialResolver
from yeet.engine.adapters import GenerationAdapter, build_adapter
from yeet.engine.pricing import PricingTable
from yeet.engine.transport import DEFAULT_TRANSPORT, HTTPTransport
from yeet.errors import MissingCredentialError, NoProviderAvailableError, UnknownProviderError

logger = logging.getLogger(__name__)


class Selection(NamedTuple):
    adapter: GenerationAdapter
    provider: ResolvedProvider


class _Candidate(NamedTuple):
    provider: ResolvedProvider
    api_key: str


class ProviderSelector:
    """Resolves ``config.active_provider`` into a ready-to-use adapter."""

    def __init__(
        self,
        resolver: CredentialResolver,
        pricing: PricingTable,
        *,
        registry: ProviderRegistry = REGISTRY,
        transport: HTTPTransport = DEFAULT_TRANSPORT,
    ) -> None:
        self._resolver = resolver
        self._pricing = pricing
        self._registry = registry
        self._transport = transport

    def select(self, config: Configuration) -> Selection:
        """Return the adapter and resolved provider for *config*.

        Raises:
            UnknownProviderError: the named provider does not resolve.
            MissingCredentialError: it needs a key and none was found.
            NoProviderAvailableError: ``auto`` found no provider with a key.
        """
        if config.active_provider == AUTO:
            candidate = self._cheapest(config)
            if candidate is None:
                raise NoProviderAvailableError
            logger.debug(
                "Auto-selected %s (%s)", candidate.provider.name, candidate.provider.model
            )
        else:
            candidate = self._direct(config, config.active_provider)

        adapter = build_adapter(candidate.provider, candidate.api_key, transport=self._transport)
        return Selection(adapter=adapter, provider=candidate.provider)

    def auto_model_name(self, config: Configuration) -> str:
        """The model ``auto`` would use right now, or ``""`` if none qualifies."""
        candidate = self._cheapest(config)
        return candidate.provider.model if candidate else ""

    def _direct(self, config: Configuration, name: str) -> _Candidate:
        provider = config.resolve_provider(name, self._registry)
        if provider is None:
            raise UnknownProviderError(name)
        if not provider.needs_auth:
            return _Candidate(provider, "")
        credential = self._resolver.resolve(name, provider.env_var)
        if not credential.found:
            raise MissingCredentialError(name, provider.env_var)
        logger.debug("Using %s credential for %s", credential.source.value, name)
        return _Candidate(provider, credential.value)

    def _candidates(self, config: Configuration) -> list[_Candidate]:
        imported = self._resolver.list_imported_providers()
        found: list[_Candidate] = []
        for name in config.all_provider_names(self._registry, imported):
            if name == AUTO:
                continue
            provider = config.resolve_provider(name, self._registry)
            if provider is None:
                continue
            if provider.protocol == WireProtocol.OLLAMA or not provider.needs_auth:
                continue
            credential = self._resolver.resolve(name, provider.env_var)
            if not credential.found:
                continue
            found.append(_Candidate(provider, credential.value))
        return found

    def _cheapest(self, config: Configuration) -> _Candidate | None:
        candidates = self._candidates(config)
        if not candidates:
            return None

        def sort_key(candidate: _Candidate) -> tuple[bool, float]:
            price = self._pricing.input_cost_per_million(candidate.provider.model)
            return (price < 0, max(price, 0.0))

        # sorted() is stable, so ties keep name order.
        return sorted(candidates, key=sort_key)[0]
