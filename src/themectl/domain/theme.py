"""Theme metadata from ``themes/<theme>/config.json``.

The metadata is optional. When present it feeds the style-sheet header and
the translation catalog header. It is read fresh by every task that needs
it so edits are picked up in watch mode.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# WordPress reads these header lines in this order; unknown keys follow.
HEADER_ORDER: tuple[str, ...] = (
    "theme-name",
    "name",
    "theme-uri",
    "author",
    "author-uri",
    "description",
    "version",
    "requires-at-least",
    "tested-up-to",
    "requires-php",
    "license",
    "license-uri",
    "text-domain",
    "domain-path",
    "tags",
)

_LABEL_OVERRIDES = {"name": "Theme Name"}
_ACRONYMS = frozenset({"uri", "url", "php", "css"})


class ThemeMeta(BaseModel):
    """Key-value record describing a theme. Unknown keys are kept verbatim."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    text_domain: str | None = Field(default=None, alias="text-domain")
    author: str | None = None
    author_uri: str | None = Field(default=None, alias="author-uri")

    def with_default_domain(self, domain: str | None) -> ThemeMeta:
        """Fill ``text-domain`` from *domain* when the file leaves it unset."""
        if self.text_domain is not None or domain is None:
            return self
        return self.model_copy(update={"text_domain": domain})

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def header_fields(self) -> list[tuple[str, str]]:
        """``(label, value)`` pairs for a WordPress style-sheet header."""
        data = self.as_dict()
        ordered = [key for key in HEADER_ORDER if key in data]
        ordered += [key for key in data if key not in HEADER_ORDER]
        return [(header_label(key), _header_value(data[key])) for key in ordered]


def header_label(key: str) -> str:
    """``"author-uri"`` -> ``"Author URI"``."""
    if key in _LABEL_OVERRIDES:
        return _LABEL_OVERRIDES[key]
    words = key.replace("_", "-").split("-")
    return " ".join(w.upper() if w.lower() in _ACRONYMS else w.capitalize() for w in words if w)


def _header_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def load_theme_meta(path: Path) -> ThemeMeta | None:
    """Load theme metadata, or None when the file does not exist.

    Raises:
        ValueError: The file exists but is not a JSON object.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Theme config {path} must contain a JSON object"
        raise ValueError(msg)
    return ThemeMeta.model_validate(data)
