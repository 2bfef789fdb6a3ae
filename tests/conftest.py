"""Shared fixtures: isolated user dirs, an in-memory keyring, mock HTTP."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from keyring.errors import PasswordDeleteError

from yeet.config.registry import WireProtocol
from yeet.config.settings import ResolvedProvider
from yeet.credentials import CredentialResolver
from yeet.engine.transport import HTTPTransport

_PROVIDER_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "GROQ_API_KEY",
    "OPENROUTER_API_KEY",
    "MISTRAL_API_KEY",
)


class MemoryStore:
    """In-memory ``CredentialStore``."""

    def __init__(self) -> None:
        self.secrets: dict[tuple[str, str], str] = {}

    def get(self, service: str, account: str) -> str | None:
        return self.secrets.get((service, account))

    def set(self, service: str, account: str, secret: str) -> None:
        self.secrets[(service, account)] = secret

    def delete(self, service: str, account: str) -> None:
        if (service, account) not in self.secrets:
            raise PasswordDeleteError("not found")
        del self.secrets[(service, account)]


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config and data dirs at a temp dir and clear provider keys."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in _PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def imported_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "opencode" / "auth.json"


@pytest.fixture()
def write_imported(imported_path: Path) -> Callable[[dict[str, object]], Path]:
    def write(entries: dict[str, object]) -> Path:
        imported_path.parent.mkdir(parents=True, exist_ok=True)
        imported_path.write_text(json.dumps(entries))
        return imported_path

    return write


@pytest.fixture()
def make_resolver(
    store: MemoryStore, imported_path: Path
) -> Callable[..., CredentialResolver]:
    def make(environ: dict[str, str] | None = None) -> CredentialResolver:
        if environ is None:
            environ = {}
        return CredentialResolver(store, imported_path=imported_path, environ=environ)

    return make


@pytest.fixture()
def mock_transport() -> Callable[[Callable[[httpx.Request], httpx.Response]], HTTPTransport]:
    """Build an ``HTTPTransport`` whose requests go to *handler*."""

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> HTTPTransport:
        return HTTPTransport(transport=httpx.MockTransport(handler))

    return make


_PROVIDER_DEFAULTS: dict[WireProtocol, dict[str, object]] = {
    WireProtocol.ANTHROPIC: {
        "name": "anthropic",
        "model": "claude-haiku-4-5-20251001",
        "url": "https://api.anthropic.com/v1",
        "env_var": "ANTHROPIC_API_KEY",
        "needs_auth": True,
    },
    WireProtocol.OPENAI: {
        "name": "openai",
        "model": "gpt-4o-mini",
        "url": "https://api.openai.com/v1",
        "env_var": "OPENAI_API_KEY",
        "needs_auth": True,
    },
    WireProtocol.OLLAMA: {
        "name": "ollama",
        "model": "llama3",
        "url": "http://localhost:11434",
        "env_var": "",
        "needs_auth": False,
    },
}


@pytest.fixture()
def make_provider() -> Callable[..., ResolvedProvider]:
    """Build a ``ResolvedProvider`` with per-protocol defaults."""

    def make(protocol: WireProtocol = WireProtocol.OPENAI, **overrides: object) -> ResolvedProvider:
        fields = {**_PROVIDER_DEFAULTS[protocol], "protocol": protocol, **overrides}
        return ResolvedProvider.model_validate(fields)

    return make
