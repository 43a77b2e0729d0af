"""Project settings file discovery and loading.

The settings file is ``config.json`` in the project root. Unlike the theme
config files of the same name, it is never searched for in parent
directories. Supports the THEMECTL_CONFIG env var and the --config flag.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "THEMECTL_CONFIG"


class SettingsFileError(ValueError):
    """The settings file exists but cannot be used."""


def find_config(start: Path | None = None) -> Path | None:
    """Locate the project settings file.

    Checks THEMECTL_CONFIG first, then ``config.json`` in *start*
    (default: cwd). Returns None if neither exists.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    candidate = (start or Path.cwd()) / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_settings_file(path: Path | None) -> dict[str, Any]:
    """Parse the settings file into a dict.

    A missing file (or None) yields ``{}``. Malformed JSON, or a top level
    that is not an object, raises :class:`SettingsFileError`.
    """
    if path is None or not path.is_file():
        return {}
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise SettingsFileError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a JSON object, got {type(data).__name__}"
        raise SettingsFileError(msg)
    return data
