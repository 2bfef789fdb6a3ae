"""Live model listings from a provider's API."""

from __future__ import annotations

import logging

from yeet.config.registry import REGISTRY, ProviderRegistry, WireProtocol
from yeet.config.settings import Configuration, ResolvedProvider
from yeet.credentials import CredentialResolver
from yeet.engine.adapters.anthropic import ANTHROPIC_VERSION
from yeet.engine.transport import (
    DEFAULT_TRANSPORT,
    HTTPTransport,
    endpoint,
    parse_json,
    raise_for_status,
)
from yeet.errors import MissingCredentialError, UnknownProviderError

logger = logging.getLogger(__name__)

CATALOG_TIMEOUT = 5.0


async def list_models(
    name: str,
    config: Configuration,
    resolver: CredentialResolver,
    *,
    registry: ProviderRegistry = REGISTRY,
    transport: HTTPTransport = DEFAULT_TRANSPORT,
) -> list[str]:
    """Return the sorted model ids *name* currently offers."""
    provider = config.resolve_provider(name, registry)
    if provider is None:
        raise UnknownProviderError(name)

    if provider.protocol == WireProtocol.OLLAMA:
        return await _ollama_tags(provider, transport)

    key = ""
    if provider.needs_auth:
        credential = resolver.resolve(name, provider.env_var)
        if not credential.found:
            raise MissingCredentialError(name, provider.env_var)
        key = credential.value

    if provider.protocol == WireProtocol.ANTHROPIC:
        url = endpoint(provider.url, "/models?limit=100")
        headers = {"x-api-key": key, "anthropic-version": ANTHROPIC_VERSION}
    else:
        url = endpoint(provider.url, "/models")
        headers = {"authorization": f"Bearer {key}"} if key else {}

    response = await transport.request_json(url, headers, method="GET", timeout=CATALOG_TIMEOUT)
    raise_for_status(response)
    data = parse_json(response).get("data") or []
    return sorted(item["id"] for item in data if isinstance(item, dict) and item.get("id"))


async def _ollama_tags(provider: ResolvedProvider, transport: HTTPTransport) -> list[str]:
    url = endpoint(provider.url, "/api/tags")
    response = await transport.request_json(url, {}, method="GET", timeout=CATALOG_TIMEOUT)
    raise_for_status(response)
    models = parse_json(response).get("models") or []
    names = [
        item["name"].removesuffix(":latest")
        for item in models
        if isinstance(item, dict) and item.get("name")
    ]
    logger.debug("Ollama at %s reports %d model(s)", provider.url, len(names))
    return sorted(names)
