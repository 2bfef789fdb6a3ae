"""Tests for the Ollama chat adapter."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from yeet.config.registry import WireProtocol
from yeet.config.settings import ResolvedProvider
from yeet.engine.adapters import OllamaAdapter, build_adapter
from yeet.engine.models import CommitContext
from yeet.engine.transport import HTTPTransport
from yeet.errors import EmptyResponseError, ParseError, ProtocolError, TransportError


def _ndjson(*chunks: object) -> bytes:
    return "".join(json.dumps(c) + "\n" for c in chunks).encode()


@pytest.fixture()
def make_adapter(
    make_provider: Callable[..., ResolvedProvider], mock_transport: Callable[..., HTTPTransport]
) -> Callable[..., OllamaAdapter]:
    def make(handler: Callable[[httpx.Request], httpx.Response]) -> OllamaAdapter:
        return OllamaAdapter(
            make_provider(WireProtocol.OLLAMA),
            transport=mock_transport(handler),
            prompt_loader=lambda: "sys",
        )

    return make


class TestGenerate:
    async def test_success(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "message": {"role": "assistant", "content": "chore: bump deps\n"},
                    "done": True,
                    "prompt_eval_count": 80,
                    "eval_count": 5,
                },
            )

        result = await make_adapter(handler).generate(CommitContext(diff="+x"))

        assert result.text == "chore: bump deps"
        assert (result.usage.input_tokens, result.usage.output_tokens) == (80, 5)
        assert str(seen[0].url) == "http://localhost:11434/api/chat"
        assert "authorization" not in seen[0].headers
        body = json.loads(seen[0].content)
        assert body["stream"] is False
        assert body["messages"][0] == {"role": "system", "content": "sys"}
        assert "max_tokens" not in body

    async def test_model_not_found(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        adapter = make_adapter(
            lambda request: httpx.Response(404, json={"error": 'model "llama9" not found'})
        )
        with pytest.raises(ProtocolError, match="llama9"):
            await adapter.generate(CommitContext())

    async def test_unreachable_hint(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match=r"is Ollama running at http://localhost:11434\?"):
            await make_adapter(handler).generate(CommitContext())

    async def test_empty(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        adapter = make_adapter(lambda request: httpx.Response(200, json={"message": {"content": ""}}))
        with pytest.raises(EmptyResponseError):
            await adapter.generate(CommitContext())

    @pytest.mark.parametrize(
        "payload",
        [
            {"message": {"content": 5}},
            {"message": {"content": "x"}, "prompt_eval_count": "n/a"},
            {"message": {"content": "x"}, "eval_count": [4]},
        ],
    )
    async def test_wrongly_typed_fields(
        self, make_adapter: Callable[..., OllamaAdapter], payload: dict[str, object]
    ) -> None:
        adapter = make_adapter(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(ParseError):
            await adapter.generate(CommitContext())

    def test_built_without_key(self, make_provider: Callable[..., ResolvedProvider]) -> None:
        assert isinstance(build_adapter(make_provider(WireProtocol.OLLAMA)), OllamaAdapter)


class TestGenerateStreaming:
    async def test_ndjson_stream(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        body = _ndjson(
            {"message": {"content": "docs"}, "done": False},
            {"message": {"content": ": fix readme"}, "done": False},
            {"message": {"content": ""}, "done": True, "prompt_eval_count": 30, "eval_count": 4},
        )
        adapter = make_adapter(lambda request: httpx.Response(200, content=body))
        tokens: list[str] = []
        result = await adapter.generate_streaming(CommitContext(), tokens.append)

        assert tokens == ["docs", ": fix readme"]
        assert result.text == "docs: fix readme"
        assert (result.usage.input_tokens, result.usage.output_tokens) == (30, 4)

    async def test_malformed_lines_skipped(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        body = b'not json\n\n{"message": {"content": "test: ok"}, "done": true}\n'
        adapter = make_adapter(lambda request: httpx.Response(200, content=body))
        result = await adapter.generate_streaming(CommitContext(), lambda _: None)
        assert result.text == "test: ok"

    async def test_error_line(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        body = _ndjson({"error": "out of memory"})
        adapter = make_adapter(lambda request: httpx.Response(200, content=body))
        with pytest.raises(ProtocolError, match="out of memory"):
            await adapter.generate_streaming(CommitContext(), lambda _: None)

    async def test_unreachable_hint(self, make_adapter: Callable[..., OllamaAdapter]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="is Ollama running"):
            await make_adapter(handler).generate_streaming(CommitContext(), lambda _: None)

    @pytest.mark.parametrize(
        "chunk",
        [
            {"message": "docs", "done": False},
            {"message": {"content": 5}, "done": False},
            {"message": {"content": ""}, "done": True, "eval_count": "n/a"},
        ],
    )
    async def test_wrongly_typed_chunk(
        self, make_adapter: Callable[..., OllamaAdapter], chunk: dict[str, object]
    ) -> None:
        body = _ndjson({"message": {"content": "docs"}, "done": False}, chunk)
        adapter = make_adapter(lambda request: httpx.Response(200, content=body))
        with pytest.raises(ParseError):
            await adapter.generate_streaming(CommitContext(), lambda _: None)
