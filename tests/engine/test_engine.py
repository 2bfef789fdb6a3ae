"""Tests for the Engine facade."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from yeet.config.settings import Configuration, PricingOverride
from yeet.credentials import CredentialResolver
from yeet.engine import Engine
from yeet.engine.models import CommitContext, GenerationResult, Usage
from yeet.engine.selector import Selection
from yeet.engine.transport import HTTPTransport
from yeet.errors import MissingCredentialError

OPENAI_REPLY = {
    "choices": [{"message": {"content": "feat: add greeting"}}],
    "usage": {"prompt_tokens": 120, "completion_tokens": 8},
}

OPENAI_STREAM = (
    b'data: {"choices":[{"delta":{"content":"feat"}}]}\n\n'
    b'data: {"choices":[{"delta":{"content":": add greeting"}}]}\n\n'
    b"data: [DONE]\n\n"
)


class TestGenerate:
    async def test_blocking_when_no_callback(
        self,
        make_resolver: Callable[..., CredentialResolver],
        mock_transport: Callable[..., HTTPTransport],
    ) -> None:
        bodies: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(200, json=OPENAI_REPLY)

        engine = Engine(
            Configuration(active_provider="openai"),
            resolver=make_resolver({"OPENAI_API_KEY": "sk-1"}),
            transport=mock_transport(handler),
        )
        result = await engine.generate(CommitContext(diff="+hello"))

        assert result.text == "feat: add greeting"
        assert b'"stream"' not in bodies[0]
        assert engine.cost_line(result.usage).endswith("120 in / 8 out · gpt-4o-mini")
        assert engine.cost_line(result.usage).startswith("$")

    async def test_streams_with_callback(
        self,
        make_resolver: Callable[..., CredentialResolver],
        mock_transport: Callable[..., HTTPTransport],
    ) -> None:
        engine = Engine(
            Configuration(active_provider="openai"),
            resolver=make_resolver({"OPENAI_API_KEY": "sk-1"}),
            transport=mock_transport(lambda request: httpx.Response(200, content=OPENAI_STREAM)),
        )
        tokens: list[str] = []
        result = await engine.generate(CommitContext(diff="+hello"), tokens.append)
        assert tokens == ["feat", ": add greeting"]
        assert result.text == "feat: add greeting"

    async def test_selection_error_before_any_request(
        self,
        make_resolver: Callable[..., CredentialResolver],
        mock_transport: Callable[..., HTTPTransport],
    ) -> None:
        handler = MagicMock(return_value=httpx.Response(200, json=OPENAI_REPLY))
        engine = Engine(
            Configuration(active_provider="anthropic"),
            resolver=make_resolver(),
            transport=mock_transport(handler),
        )
        with pytest.raises(MissingCredentialError):
            await engine.generate(CommitContext(diff="+x"))
        handler.assert_not_called()

    async def test_uses_given_selection(self, make_resolver: Callable[..., CredentialResolver], make_provider: Callable[..., object]) -> None:
        provider = make_provider()
        adapter = MagicMock(spec=["provider", "generate"])
        adapter.provider = provider
        adapter.generate = AsyncMock(
            return_value=GenerationResult(text="x", usage=Usage(model_id="gpt-4o-mini"))
        )
        engine = Engine(Configuration(active_provider="anthropic"), resolver=make_resolver())

        result = await engine.generate(
            CommitContext(), lambda _: None, selection=Selection(adapter, provider)
        )
        assert result.text == "x"
        adapter.generate.assert_awaited_once()

    async def test_streaming_adapter_without_callback_blocks(
        self, make_resolver: Callable[..., CredentialResolver], make_provider: Callable[..., object]
    ) -> None:
        provider = make_provider()
        adapter = MagicMock(spec=["provider", "generate", "generate_streaming", "supports_streaming"])
        adapter.provider = provider
        adapter.supports_streaming = True
        adapter.generate = AsyncMock(
            return_value=GenerationResult(text="x", usage=Usage(model_id="gpt-4o-mini"))
        )
        adapter.generate_streaming = AsyncMock()
        engine = Engine(Configuration(active_provider="openai"), resolver=make_resolver())

        await engine.generate(CommitContext(), selection=Selection(adapter, provider))

        adapter.generate.assert_awaited_once()
        adapter.generate_streaming.assert_not_awaited()


class TestPricing:
    def test_overrides_applied(self, make_resolver: Callable[..., CredentialResolver]) -> None:
        config = Configuration(pricing_overrides={"llama3": PricingOverride(input=0.0, output=0.0)})
        engine = Engine(config, resolver=make_resolver())
        usage = Usage(model_id="llama3", input_tokens=1000, output_tokens=10)
        assert engine.cost_line(usage) == "$0.0000 · 1.0k in / 10 out · llama3"

    def test_auto_model_name(self, make_resolver: Callable[..., CredentialResolver]) -> None:
        engine = Engine(Configuration(), resolver=make_resolver({"ANTHROPIC_API_KEY": "a"}))
        assert engine.auto_model_name() == "claude-haiku-4-5-20251001"
