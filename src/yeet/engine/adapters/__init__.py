"""Protocol adapters — one per wire protocol.

Every adapter satisfies :class:`GenerationAdapter`; the ones that can also
stream satisfy :class:`StreamingAdapter`. The engine never needs to know
which concrete class it holds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from yeet.config.registry import WireProtocol
from yeet.engine.adapters.anthropic import AnthropicAdapter
from yeet.engine.adapters.ollama import OllamaAdapter
from yeet.engine.adapters.openai import OpenAIAdapter
from yeet.engine.transport import DEFAULT_TRANSPORT, HTTPTransport

if TYPE_CHECKING:
    from yeet.config.settings import ResolvedProvider
    from yeet.engine.models import CommitContext, GenerationResult
    from yeet.engine.stream import TokenCallback


@runtime_checkable
class GenerationAdapter(Protocol):
    """Turns a commit context into a message with one blocking request."""

    provider: ResolvedProvider

    async def generate(self, ctx: CommitContext) -> GenerationResult:
        """Return the stripped, non-empty message and its usage."""
        ...


@runtime_checkable
class StreamingAdapter(GenerationAdapter, Protocol):
    """An adapter that can also deliver the message token by token."""

    async def generate_streaming(
        self, ctx: CommitContext, on_token: TokenCallback
    ) -> GenerationResult:
        """Call ``on_token`` for each non-empty text chunk, in order."""
        ...


ADAPTERS: dict[WireProtocol, type] = {
    WireProtocol.ANTHROPIC: AnthropicAdapter,
    WireProtocol.OPENAI: OpenAIAdapter,
    WireProtocol.OLLAMA: OllamaAdapter,
}


def build_adapter(
    provider: ResolvedProvider,
    api_key: str = "",
    *,
    transport: HTTPTransport = DEFAULT_TRANSPORT,
) -> GenerationAdapter:
    """Instantiate the adapter for ``provider.protocol``."""
    adapter_cls = ADAPTERS[provider.protocol]
    return adapter_cls(provider, api_key, transport=transport)


__all__ = [
    "ADAPTERS",
    "AnthropicAdapter",
    "GenerationAdapter",
    "OllamaAdapter",
    "OpenAIAdapter",
    "StreamingAdapter",
    "build_adapter",
]
