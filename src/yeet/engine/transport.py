"""Shared HTTP transport for provider requests.

Every call opens its own ``httpx.AsyncClient`` from one immutable
``HTTPTransport`` so timeouts are configured in a single place:

- connect (including TLS) — 10 s
- response headers — 15 s
- whole blocking exchange — 60 s
- streaming bodies — no overall limit; the caller cancels the task instead
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from yeet.errors import ParseError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10.0
HEADER_TIMEOUT = 15.0
REQUEST_TIMEOUT = 60.0


class HTTPTransport:
    """Immutable HTTP settings plus helpers for blocking and streaming POSTs.

    ``transport`` is passed through to ``httpx.AsyncClient``; tests use it to
    plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        connect_timeout: float = CONNECT_TIMEOUT,
        header_timeout: float = HEADER_TIMEOUT,
        request_timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._transport = transport
        self._timeout = httpx.Timeout(
            connect=connect_timeout, read=None, write=connect_timeout, pool=connect_timeout
        )
        self._header_timeout = header_timeout
        self._request_timeout = request_timeout

    @property
    def header_timeout(self) -> float:
        return self._header_timeout

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    def client(self, **kwargs: Any) -> httpx.AsyncClient:
        """A fresh client with the shared timeouts; close it after use."""
        kwargs.setdefault("timeout", self._timeout)
        if self._transport is not None:
            kwargs.setdefault("transport", self._transport)
        return httpx.AsyncClient(**kwargs)

    async def _open(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send the request and wait for the response headers only."""
        request = client.build_request(method, url, json=body, headers=headers)
        logger.debug("%s %s", method, url)
        try:
            response = await asyncio.wait_for(
                client.send(request, stream=True), self._header_timeout
            )
        except TimeoutError as exc:
            msg = f"no response from {url} within {self._header_timeout:g}s"
            raise TransportError(msg) from exc
        except httpx.TransportError as exc:
            raise TransportError(_describe(exc)) from exc
        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    async def request_json(
        self,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
        *,
        method: str = "POST",
        timeout: float | None = None,
    ) -> httpx.Response:
        """Run a complete exchange under the blocking deadline.

        The returned response has its body read and its connection closed.
        """
        deadline = timeout if timeout is not None else self._request_timeout

        async def exchange() -> httpx.Response:
            async with self.client() as client:
                response = await self._open(client, method, url, headers, body)
                try:
                    await response.aread()
                except httpx.TransportError as exc:
                    raise TransportError(_describe(exc)) from exc
                finally:
                    await response.aclose()
                return response

        try:
            return await asyncio.wait_for(exchange(), deadline)
        except TimeoutError as exc:
            raise TransportError(f"request timed out after {deadline:g}s") from exc

    @asynccontextmanager
    async def stream(
        self, url: str, headers: dict[str, str], body: dict[str, Any]
    ) -> AsyncIterator[httpx.Response]:
        """POST *body* and yield the open response for incremental reading."""
        async with self.client() as client:
            response = await self._open(client, "POST", url, headers, body)
            try:
                yield response
            finally:
                await response.aclose()


DEFAULT_TRANSPORT = HTTPTransport()


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def endpoint(base_url: str, path: str) -> str:
    """Join a provider base URL and an API path."""
    return base_url.rstrip("/") + path


def error_message(body: bytes) -> str | None:
    """Pull a provider error message out of a JSON error body.

    Understands ``{"error": {"message": ...}}`` (Anthropic, OpenAI) and
    ``{"error": "..."}`` (Ollama).
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) and message else None
    if isinstance(error, str) and error:
        return error
    return None


def raise_for_status(response: httpx.Response) -> None:
    """Raise ``ProtocolError`` for a non-2xx response whose body has been read."""
    if response.is_success:
        return
    raise ProtocolError(response.status_code, error_message(response.content))


def parse_json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body or raise ``ParseError``."""
    try:
        payload = response.json()
    except ValueError as exc:
        raise ParseError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise ParseError("expected a JSON object")
    return payload


def json_object(value: Any, field: str) -> dict[str, Any]:
    """*value* as a JSON object; a missing field reads as ``{}``."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{field} is not an object")
    return value


def json_text(value: Any, field: str) -> str:
    """*value* as a string; a missing field reads as ``""``."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(f"{field} is not a string")
    return value


def token_count(value: Any, field: str) -> int:
    """A usage counter; a missing field reads as ``0``."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ParseError(f"{field} is not a token count")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"{field} is not a token count") from exc
