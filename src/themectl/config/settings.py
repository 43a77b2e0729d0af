"""Unified settings — CLI flags, env vars, and the JSON settings file in one object.

Priority chain (highest to lowest):
  1. Init kwargs   — CLI flags and ``--set`` overrides passed by Click
  2. Env vars      — ``THEMECTL_*`` prefix
  3. JSON file     — ``config.json`` in the project root
  4. Defaults      — a defaults source plus the field defaults

Sources are deep-merged by pydantic-settings: objects merge key by key,
scalars and arrays are replaced. ``domain`` is derived from ``theme`` after
the merge when no source sets it.
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from themectl.config.discovery import SettingsFileError, find_config, load_settings_file
from themectl.config.models import DEFAULT_DOWNLOAD_URL, ServerConfig
from themectl.domain.naming import kebab_case
from themectl.domain.paths import PUBLIC_DIR, PathTable, build_path_table

# Settings-file spellings -> field names.
_TOP_LEVEL_KEYS = {
    "latestWordpressURL": "download_url",
    "locals": "template_locals",
    "stylePlugins": "style_plugins",
}
_SERVER_KEYS = {"logPrefix": "log_prefix"}


def normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Rename settings-file keys to field names so every source merges alike."""
    out = {_TOP_LEVEL_KEYS.get(key, key): value for key, value in data.items()}
    server = out.get("server")
    if isinstance(server, dict):
        out["server"] = {_SERVER_KEYS.get(key, key): value for key, value in server.items()}
    return out


def build_timestamp() -> int:
    """Milliseconds since the epoch, used to bust asset caches in templates."""
    return int(time.time() * 1000)


def parse_overrides(pairs: Iterable[str]) -> dict[str, Any]:
    """Turn ``KEY=VALUE`` strings into a nested dict.

    Dotted keys nest (``server.port=3000``). Values are parsed as JSON when
    possible and kept as plain strings otherwise.

    Raises:
        ValueError: A pair has no ``=`` or an empty key.
    """
    result: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key.strip():
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise ValueError(msg)
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        *parents, leaf = key.strip().split(".")
        node = result
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value
    return result


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated by *override*, merging nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class JsonSettingsSource(PydanticBaseSettingsSource):
    """Read settings from the project's ``config.json``."""

    def __init__(self, settings_cls: type[BaseSettings], json_path: Path | None) -> None:
        super().__init__(settings_cls)
        try:
            self._data = normalize_keys(load_settings_file(json_path))
        except SettingsFileError as exc:
            import click

            raise click.ClickException(str(exc)) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


class DefaultSettingsSource(PydanticBaseSettingsSource):
    """Lowest-priority source so dict-valued defaults merge instead of being replaced."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return {"template_locals": {"version": build_timestamp()}}


# Thread-local storage for the settings file path during construction.
_tls = threading.local()


class ThemeSettings(BaseSettings):
    """Effective configuration for one run, frozen after construction.

    Stored on the :class:`~themectl.commands._context.AppContext` and passed
    to every task through the build context; nothing reads it globally.

    Attributes:
        project_root: Directory holding ``themes/`` and ``public/``.
        config_path: The settings file that was loaded, if any.
        theme: Theme folder name under ``themes/``.
        domain: Text domain; ``kebab_case(theme)`` unless set.
        template_locals: Variables bound when rendering templates.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="THEMECTL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # --- Resolved paths (not in config.json) ---
    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI-only flags ---
    verbose: bool = False
    log_json: bool = False
    json_output: bool = False

    # --- Build settings ---
    download_url: str = DEFAULT_DOWNLOAD_URL
    production: bool = False
    theme: str | None = None
    domain: str | None = None
    template_locals: dict[str, Any] = Field(default_factory=dict)
    style_plugins: list[str] = Field(default_factory=lambda: ["bourbon", "neat"])
    workers: int = Field(default=4, ge=1)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @model_validator(mode="before")
    @classmethod
    def _derive_domain(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("domain") is None and data.get("theme"):
            data = {**data, "domain": kebab_case(str(data["theme"]))}
        return data

    @property
    def public_root(self) -> Path:
        return self.project_root / PUBLIC_DIR

    @property
    def paths(self) -> PathTable | None:
        """Path table for the configured theme, or None without a theme."""
        if not self.theme:
            return None
        return build_path_table(self.theme)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the JSON file and defaults sources below env vars."""
        json_path = getattr(_tls, "json_path", None)
        return (
            init_settings,
            env_settings,
            JsonSettingsSource(settings_cls, json_path),
            DefaultSettingsSource(settings_cls),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        overrides: dict[str, Any] | None = None,
        **cli_flags: Any,
    ) -> ThemeSettings:
        """Construct settings from a CLI invocation.

        Flags left at ``None`` are dropped so they never mask lower-priority
        sources. *overrides* (from ``--set``) merge under explicit flags.
        An explicit *config_path* must exist; the discovered ``config.json``
        may be absent.
        """
        root = project_root or Path.cwd()
        json_path: Path | None = None
        if config_path:
            json_path = Path(config_path)
            if not json_path.is_file():
                import click

                msg = f"Config file not found: {json_path}"
                raise click.ClickException(msg)
        else:
            json_path = find_config(root)

        flags = {key: value for key, value in cli_flags.items() if value is not None}
        data = deep_merge(normalize_keys(overrides or {}), normalize_keys(flags))

        _tls.json_path = json_path
        try:
            return cls(project_root=root, config_path=json_path, **data)
        finally:
            _tls.json_path = None
