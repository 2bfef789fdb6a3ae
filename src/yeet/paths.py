"""User-level file locations, following the XDG base directory layout."""

from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "yeet"


def config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME/yeet``, defaulting to ``~/.config/yeet``."""
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def data_dir() -> Path:
    """Return ``$XDG_DATA_HOME``, defaulting to ``~/.local/share``."""
    base = os.environ.get("XDG_DATA_HOME")
    if base:
        return Path(base)
    return Path.home() / ".local" / "share"


def config_file() -> Path:
    return config_dir() / "config.toml"


def prompt_file() -> Path:
    return config_dir() / "prompt.txt"


def imported_credentials_file() -> Path:
    """OpenCode's ``auth.json``, the store ``yeet`` imports keys from."""
    return data_dir() / "opencode" / "auth.json"
