"""Commit-message generation engine.

``Engine`` ties the pieces together for one invocation: it owns the pricing
table (with the config's overrides applied), selects a provider, and runs
the request in blocking or streaming mode.

Usage::

    engine = Engine(load_config())
    result = await engine.generate(CommitContext(diff=diff), on_token=print)
    print(engine.cost_line(result.usage))
"""

from __future__ import annotations

import logging

from yeet.config.registry import REGISTRY, ProviderRegistry
from yeet.config.settings import Configuration
from yeet.credentials import CredentialResolver
from yeet.engine.adapters import StreamingAdapter
from yeet.engine.catalog import list_models
from yeet.engine.context import MAX_DIFF_LINES
from yeet.engine.models import CommitContext, GenerationResult, Usage
from yeet.engine.pricing import PricingTable, cost_line
from yeet.engine.selector import ProviderSelector, Selection
from yeet.engine.stream import TokenCallback
from yeet.engine.transport import DEFAULT_TRANSPORT, HTTPTransport
from yeet.utils.telemetry import (
    ATTR_DIFF_TRUNCATED,
    ATTR_MODEL,
    ATTR_PROTOCOL,
    ATTR_PROVIDER,
    ATTR_STREAMING,
    ATTR_TOKENS_INPUT,
    ATTR_TOKENS_OUTPUT,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class Engine:
    """One configured generation engine, scoped to a single invocation."""

    def __init__(
        self,
        config: Configuration,
        *,
        resolver: CredentialResolver | None = None,
        transport: HTTPTransport | None = None,
        registry: ProviderRegistry = REGISTRY,
    ) -> None:
        self.config = config
        self.registry = registry
        self.resolver = resolver or CredentialResolver()
        self.transport = transport or DEFAULT_TRANSPORT
        self.pricing = PricingTable()
        self.pricing.apply_overrides(config.pricing_overrides)
        self.selector = ProviderSelector(
            self.resolver, self.pricing, registry=registry, transport=self.transport
        )

    def select(self) -> Selection:
        """Pick the provider for the configured ``active_provider``."""
        return self.selector.select(self.config)

    def auto_model_name(self) -> str:
        return self.selector.auto_model_name(self.config)

    async def generate(
        self,
        ctx: CommitContext,
        on_token: TokenCallback | None = None,
        *,
        selection: Selection | None = None,
    ) -> GenerationResult:
        """Generate a message for *ctx*.

        Streams through *on_token* when given and the adapter supports it;
        otherwise makes one blocking request. Provider selection errors are
        raised before any network traffic.
        """
        adapter, provider = selection or self.select()
        streaming = (
            on_token is not None
            and isinstance(adapter, StreamingAdapter)
            and getattr(adapter, "supports_streaming", False)
        )

        with _tracer.start_as_current_span("yeet.generate") as span:
            span.set_attribute(ATTR_PROVIDER, provider.name)
            span.set_attribute(ATTR_MODEL, provider.model)
            span.set_attribute(ATTR_PROTOCOL, provider.protocol.value)
            span.set_attribute(ATTR_STREAMING, streaming)
            span.set_attribute(ATTR_DIFF_TRUNCATED, ctx.diff.count("\n") > MAX_DIFF_LINES)

            logger.debug(
                "Generating with %s/%s (%s)",
                provider.name,
                provider.model,
                "streaming" if streaming else "blocking",
            )
            if on_token is not None and streaming:
                result = await adapter.generate_streaming(ctx, on_token)  # type: ignore[attr-defined]
            else:
                result = await adapter.generate(ctx)

            span.set_attribute(ATTR_TOKENS_INPUT, result.usage.input_tokens)
            span.set_attribute(ATTR_TOKENS_OUTPUT, result.usage.output_tokens)

        return result

    def cost_line(self, usage: Usage) -> str:
        """``$0.0012 · 3.1k in / 28 out · model`` using this engine's prices."""
        return cost_line(usage, self.pricing)

    async def list_models(self, provider: str) -> list[str]:
        """Ask *provider* which models it offers."""
        return await list_models(
            provider,
            self.config,
            self.resolver,
            registry=self.registry,
            transport=self.transport,
        )


__all__ = ["CommitContext", "Engine", "GenerationResult", "Selection", "Usage"]
