"""OpenAI Chat Completions adapter (also used by every compatible provider)."""

from __future__ import annotations

import json
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

DONE_SENTINEL = "[DONE]"


class OpenAIAdapter:
    """Speaks ``POST <base>/chat/completions``.

    The ``Authorization`` header is only sent when the provider needs auth.
    """

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
        self._api_key = api_key
        self._transport = transport
        self._prompt_loader = prompt_loader

    @property
    def model(self) -> str:
        return self.provider.model

    @property
    def url(self) -> str:
        return endpoint(self.provider.url, "/chat/completions")

    def _headers(self) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        if self.provider.needs_auth and self._api_key:
            headers["authorization"] = f"Bearer {self._api_key}"
        return headers

    def _body(self, prompt: PreparedPrompt, *, stream: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
        }
        if stream:
            body["stream"] = True
            body["stream_options"] = {"include_usage": True}
        return body

    async def generate(self, ctx: CommitContext) -> GenerationResult:
        prompt = prepare(ctx, self._prompt_loader)
        response = await self._transport.request_json(
            self.url, self._headers(), self._body(prompt, stream=False)
        )
        raise_for_status(response)
        payload = parse_json(response)

        if payload.get("error"):
            raise ProtocolError(response.status_code, error_message(response.content))

        choices = payload.get("choices")
        if not isinstance(choices, list):
            raise ParseError("missing choices")
        if not choices:
            raise EmptyResponseError
        choice = json_object(choices[0], "choices[0]")
        message = json_object(choice.get("message"), "choices[0].message")
        content = json_text(message.get("content"), "choices[0].message.content").strip()
        if not content:
            raise EmptyResponseError

        usage = json_object(payload.get("usage"), "usage")
        return GenerationResult(
            text=content,
            usage=Usage(
                model_id=self.model,
                input_tokens=token_count(usage.get("prompt_tokens"), "usage.prompt_tokens"),
                output_tokens=token_count(usage.get("completion_tokens"), "usage.completion_tokens"),
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
                    if event.data == DONE_SENTINEL:
                        continue
                    self._handle_chunk(session, event.data)
        return session.result()

    @staticmethod
    def _handle_chunk(session: StreamSession, data: str) -> None:
        try:
            chunk = json.loads(data)
        except ValueError as exc:
            raise ParseError(f"bad stream chunk: {exc}") from exc
        if not isinstance(chunk, dict):
            raise ParseError("bad stream chunk")

        error = chunk.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProtocolError(200, str(message or "stream error"))

        choices = chunk.get("choices") or []
        if not isinstance(choices, list):
            raise ParseError("choices is not a list")
        if choices:
            choice = json_object(choices[0], "choices[0]")
            delta = json_object(choice.get("delta"), "choices[0].delta")
            session.emit(json_text(delta.get("content"), "choices[0].delta.content"))

        usage = json_object(chunk.get("usage"), "usage")
        if usage:
            session.input_tokens = token_count(usage.get("prompt_tokens"), "usage.prompt_tokens")
            session.output_tokens = token_count(usage.get("completion_tokens"), "usage.completion_tokens")
