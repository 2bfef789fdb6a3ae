"""Credential lookup — platform keyring, environment, imported store.

The resolver is a best-effort reader: a broken keyring back-end or a
malformed imported store reads as "not found" rather than an error.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import BaseModel, ConfigDict, model_validator

from yeet.paths import imported_credentials_file

logger = logging.getLogger(__name__)

SERVICE_NAME = "yeet"


class CredentialSource(str, Enum):
    """Where a key was found in the lookup chain."""

    KEYRING = "keyring"
    ENVIRONMENT = "env"
    IMPORTED = "opencode"
    NONE = ""


class Credential(BaseModel):
    """A secret value plus where it came from."""

    model_config = ConfigDict(frozen=True)

    value: str = ""
    source: CredentialSource = CredentialSource.NONE

    @model_validator(mode="after")
    def _source_matches_value(self) -> Credential:
        if (self.source == CredentialSource.NONE) != (self.value == ""):
            msg = "a credential has a value if and only if it has a source"
            raise ValueError(msg)
        return self

    @property
    def found(self) -> bool:
        return self.source != CredentialSource.NONE

    def __repr__(self) -> str:
        # Never echo the secret itself.
        return f"Credential(source={self.source.value!r}, found={self.found})"


NOT_FOUND = Credential()


@runtime_checkable
class CredentialStore(Protocol):
    """Platform secret store addressed by (service, account)."""

    def get(self, service: str, account: str) -> str | None: ...
    def set(self, service: str, account: str, secret: str) -> None: ...
    def delete(self, service: str, account: str) -> None: ...


class KeyringStore:
    """``CredentialStore`` backed by the ``keyring`` package.

    Uses whatever back-end ``keyring`` selects for the platform (macOS
    Keychain, Windows Credential Manager, Secret Service).
    """

    def get(self, service: str, account: str) -> str | None:
        return keyring.get_password(service, account)

    def set(self, service: str, account: str, secret: str) -> None:
        keyring.set_password(service, account, secret)

    def delete(self, service: str, account: str) -> None:
        keyring.delete_password(service, account)


class CredentialResolver:
    """Finds API keys using a fixed precedence chain.

    1. Platform credential store (service ``yeet``, account = provider)
    2. The environment variable named by the provider's config
    3. OpenCode's ``auth.json`` (``type == "api"`` entries only)
    """

    def __init__(
        self,
        store: CredentialStore | None = None,
        *,
        imported_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._store = store if store is not None else KeyringStore()
        self._imported_path = imported_path
        self._environ = environ

    @property
    def store(self) -> CredentialStore:
        return self._store

    def resolve(self, provider: str, env_var: str = "") -> Credential:
        """Return the first credential found for *provider*."""
        key = self._from_store(provider)
        if key:
            logger.debug("Credential for %s found in keyring", provider)
            return Credential(value=key, source=CredentialSource.KEYRING)

        if env_var:
            environ = self._environ if self._environ is not None else os.environ
            key = environ.get(env_var, "")
            if key:
                logger.debug("Credential for %s found in $%s", provider, env_var)
                return Credential(value=key, source=CredentialSource.ENVIRONMENT)

        key = self._from_imported(provider)
        if key:
            logger.debug("Credential for %s found in imported store", provider)
            return Credential(value=key, source=CredentialSource.IMPORTED)

        return NOT_FOUND

    def status(
        self, providers: Iterable[str], env_hints: Mapping[str, str]
    ) -> dict[str, Credential]:
        """Resolve every provider in *providers* (for status displays)."""
        return {name: self.resolve(name, env_hints.get(name, "")) for name in providers}

    def list_imported_providers(self) -> list[str]:
        """Provider names with a usable ``type == "api"`` imported key."""
        return [
            name
            for name, entry in self._load_imported().items()
            if entry.get("type") == "api" and entry.get("key")
        ]

    def save(self, provider: str, secret: str) -> None:
        """Store *secret* in the platform store. Errors propagate."""
        self._store.set(SERVICE_NAME, provider, secret)

    def remove(self, provider: str) -> bool:
        """Remove the stored key for *provider*. Returns ``False`` if none existed."""
        try:
            self._store.delete(SERVICE_NAME, provider)
        except PasswordDeleteError:
            return False
        return True

    # -- sources -------------------------------------------------------------

    def _from_store(self, provider: str) -> str:
        try:
            return self._store.get(SERVICE_NAME, provider) or ""
        except (KeyringError, RuntimeError) as exc:
            logger.debug("Keyring lookup for %s failed: %s", provider, exc)
            return ""

    def _from_imported(self, provider: str) -> str:
        entry = self._load_imported().get(provider)
        if entry is None or entry.get("type") != "api":
            return ""
        key = entry.get("key")
        return key if isinstance(key, str) else ""

    def _load_imported(self) -> dict[str, dict[str, object]]:
        path = self._imported_path or imported_credentials_file()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.debug("Ignoring imported credentials at %s: %s", path, exc)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {name: entry for name, entry in raw.items() if isinstance(entry, dict)}
