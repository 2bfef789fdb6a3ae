"""Anthropic Messages API adapter."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from yeet.config.settings import ResolvedProvider
from yeet.engine.context import PreparedPrompt, prepare
from yeet.engine.models import CommitContext, GenerationResult, Usage
from yeet.engine.prompt import load_prompt
from yeet.engine.sse import iter_sse
from yeet.engine.stream import StreamSession, TokenCallback
from yeet.engine.transport import (
    DEFAULT_TRANSPORT,
    HTTPTransport,
    endpoint,
    error_message,
    json_object,
    json_text,
    parse_json,
    raise_for_status,
    token_count,
)
from yeet.errors import EmptyResponseError, ParseError, ProtocolError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter:
    """Speaks ``POST <base>/messages`` with optional SSE streaming."""

    supports_streaming = True

    def __init__(
        self,
        provider: ResolvedProvider,
        api_key: str,
        *,
        transport: HTTPTransport = DEFAULT_TRANSPORT,
        prompt_loader: Callable[[], str] = load_prompt,
    ) -> None:
        self.provider = provider
        self._api_key = api_key
        self._transport = transport
        self._prompt_loader = prompt_loader

    @property
    def model(self) -> str:
        return self.provider.model

    @property
    def url(self) -> str:
        return endpoint(self.provider.url, "/messages")

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    def _body(self, prompt: PreparedPrompt, *, stream: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": prompt.max_tokens,
            "system": prompt.system,
            "messages": [{"role": "user", "content": prompt.user}],
        }
        if stream:
            body["stream"] = True
        return body

    async def generate(self, ctx: CommitContext) -> GenerationResult:
        prompt = prepare(ctx, self._prompt_loader)
        response = await self._transport.request_json(
            self.url, self._headers(), self._body(prompt, stream=False)
        )
        raise_for_status(response)
        payload = parse_json(response)

        if isinstance(payload.get("error"), dict):
            raise ProtocolError(response.status_code, error_message(response.content))

        content = payload.get("content")
        if not isinstance(content, list):
            raise ParseError("missing content")
        if not content:
            raise EmptyResponseError
        first = json_object(content[0], "content[0]")
        text = json_text(first.get("text"), "content[0].text").strip()
        if not text:
            raise EmptyResponseError

        usage = json_object(payload.get("usage"), "usage")
        return GenerationResult(
            text=text,
            usage=Usage(
                model_id=self.model,
                input_tokens=token_count(usage.get("input_tokens"), "usage.input_tokens"),
                output_tokens=token_count(usage.get("output_tokens"), "usage.output_tokens"),
            ),
        )

    async def generate_streaming(
        self, ctx: CommitContext, on_token: TokenCallback
    ) -> GenerationResult:
        prompt = prepare(ctx, self._prompt_loader)
        session = StreamSession(self.model, on_token)
        with session.running():
            async with self._transport.stream(
                self.url, self._headers(), self._body(prompt, stream=True)
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise_for_status(response)
                async for event in iter_sse(session.lines(response)):
                    self._handle_event(session, event.event, event.data)
        return session.result()

    def _handle_event(self, session: StreamSession, event: str, data: str) -> None:
        if event not in {"message_start", "content_block_delta", "message_delta", "error"}:
            return
        try:
            payload = json.loads(data)
        except ValueError as exc:
            raise ParseError(f"bad {event} event: {exc}") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"bad {event} event")

        if event == "content_block_delta":
            delta = json_object(payload.get("delta"), "delta")
            session.emit(json_text(delta.get("text"), "delta.text"))
        elif event == "message_start":
            message = json_object(payload.get("message"), "message")
            usage = json_object(message.get("usage"), "message.usage")
            session.input_tokens = token_count(usage.get("input_tokens"), "usage.input_tokens")
        elif event == "message_delta":
            usage = json_object(payload.get("usage"), "usage")
            session.output_tokens = token_count(usage.get("output_tokens"), "usage.output_tokens")
        else:
            logger.debug("Anthropic stream error event: %s", data)
            error = payload.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            raise ProtocolError(200, message if isinstance(message, str) and message else "stream error")
