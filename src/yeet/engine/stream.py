"""Bookkeeping for one streaming generation."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import contextmanager

import httpx

from yeet.engine.models import GenerationResult, StreamState, Usage
from yeet.errors import EmptyResponseError, StreamReadError, TransportError

logger = logging.getLogger(__name__)

TokenCallback = Callable[[str], None]


class StreamSession:
    """Tracks state, collects chunks and forwards them to ``on_token``.

    ``on_token`` is called from the reading task, in arrival order, and only
    once the session is in the ``STREAMING`` state.
    """

    def __init__(self, model_id: str, on_token: TokenCallback) -> None:
        self.state = StreamState.OPENING
        self.input_tokens = 0
        self.output_tokens = 0
        self._model_id = model_id
        self._on_token = on_token
        self._chunks: list[str] = []
        self._received = 0

    @contextmanager
    def running(self) -> Iterator[StreamSession]:
        """Mark the session ``CLOSED`` on normal exit, ``ABORTED`` otherwise.

        Cancellation counts as an abort.
        """
        try:
            yield self
        except BaseException:
            self.state = StreamState.ABORTED
            raise
        self.state = StreamState.CLOSED

    def emit(self, chunk: str) -> None:
        if not chunk:
            return
        self.state = StreamState.STREAMING
        self._chunks.append(chunk)
        self._on_token(chunk)

    async def lines(self, response: httpx.Response) -> AsyncIterator[str]:
        """Body lines, with read failures mapped to engine errors."""
        try:
            async for line in response.aiter_lines():
                self._received += 1
                yield line
        except (httpx.TransportError, httpx.StreamError) as exc:
            detail = str(exc) or exc.__class__.__name__
            if self._received:
                raise StreamReadError(detail) from exc
            raise TransportError(detail) from exc

    @property
    def text(self) -> str:
        return "".join(self._chunks).strip()

    def result(self) -> GenerationResult:
        text = self.text
        if not text:
            raise EmptyResponseError
        usage = Usage(
            model_id=self._model_id,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
        )
        logger.debug("Stream closed after %d chunk(s)", len(self._chunks))
        return GenerationResult(text=text, usage=usage)
