"""Ollama chat adapter. Streams newline-delimited JSON, not SSE."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from yeet.config.settings import ResolvedProvider
from yeet.engine.context import PreparedPrompt, prepare
from yeet.engine.models import CommitContext, GenerationResult, Usage
from yeet.engine.prompt import load_prompt
from yeet.engine.stream import StreamSession, TokenCallback
from yeet.engine.transport import (
    DEFAULT_TRANSPORT,
    HTTPTransport,
    endpoint,
    json_object,
    json_text,
    parse_json,
    raise_for_status,
    token_count,
)
from yeet.errors import EmptyResponseError, ParseError, ProtocolError, TransportError

logger = logging.getLogger(__name__)


class OllamaAdapter:
    """Speaks ``POST <base>/api/chat`` against a local or remote Ollama."""

    supports_streaming = True

    def __init__(
        self,
        provider: ResolvedProvider,
        api_key: str = "",
        *,
        transport: HTTPTransport = DEFAULT_TRANSPORT,
        prompt_loader: Callable[[], str] = load_prompt,
    ) -> None:
        self.provider = provider
        self._transport = transport
        self._prompt_loader = prompt_loader

    @property
    def model(self) -> str:
        return self.provider.model

    @property
    def url(self) -> str:
        return endpoint(self.provider.url, "/api/chat")

    def _body(self, prompt: PreparedPrompt, *, stream: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "stream": stream,
        }

    def _headers(self) -> dict[str, str]:
        return {"content-type": "application/json"}

    async def generate(self, ctx: CommitContext) -> GenerationResult:
        prompt = prepare(ctx, self._prompt_loader)
        try:
            response = await self._transport.request_json(
                self.url, self._headers(), self._body(prompt, stream=False)
            )
        except TransportError as exc:
            raise self._unreachable(exc) from exc
        raise_for_status(response)
        payload = parse_json(response)

        error = payload.get("error")
        if error:
            raise ProtocolError(response.status_code, str(error))

        message = payload.get("message")
        if not isinstance(message, dict):
            raise ParseError("missing message")
        content = json_text(message.get("content"), "message.content").strip()
        if not content:
            raise EmptyResponseError

        return GenerationResult(
            text=content,
            usage=Usage(
                model_id=self.model,
                input_tokens=token_count(payload.get("prompt_eval_count"), "prompt_eval_count"),
                output_tokens=token_count(payload.get("eval_count"), "eval_count"),
            ),
        )

    async def generate_streaming(
        self, ctx: CommitContext, on_token: TokenCallback
    ) -> GenerationResult:
        prompt = prepare(ctx, self._prompt_loader)
        session = StreamSession(self.model, on_token)
        with session.running():
            try:
                async with self._transport.stream(
                    self.url, self._headers(), self._body(prompt, stream=True)
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        raise_for_status(response)
                    async for line in session.lines(response):
                        self._handle_line(session, response.status_code, line)
            except TransportError as exc:
                raise self._unreachable(exc) from exc
        return session.result()

    def _unreachable(self, exc: TransportError) -> TransportError:
        return TransportError(f"{exc.detail} (is Ollama running at {self.provider.url}?)")

    @staticmethod
    def _handle_line(session: StreamSession, status: int, line: str) -> None:
        if not line.strip():
            return
        try:
            chunk = json.loads(line)
        except ValueError:
            logger.debug("Skipping malformed Ollama chunk: %r", line)
            return
        if not isinstance(chunk, dict):
            return

        error = chunk.get("error")
        if error:
            raise ProtocolError(status, str(error))

        message = json_object(chunk.get("message"), "message")
        session.emit(json_text(message.get("content"), "message.content"))

        if chunk.get("done"):
            session.input_tokens = token_count(chunk.get("prompt_eval_count"), "prompt_eval_count")
            session.output_tokens = token_count(chunk.get("eval_count"), "eval_count")
