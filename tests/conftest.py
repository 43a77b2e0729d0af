"""Shared pytest fixtures and test helpers for themectl tests."""

from __future__ import annotations

import io
import json
from collections.abc import Sequence
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image

from themectl.config.models import ServerConfig
from themectl.config.settings import ThemeSettings
from themectl.services.context import BuildContext

THEME = "my-theme"

SAMPLE_PO = """\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"
"Language: fr_FR\\n"

msgid "Hello"
msgstr "Bonjour"
"""


class RecordingDevServer:
    """Dev server double that remembers every notified path."""

    def __init__(self) -> None:
        self.notified: list[Path] = []
        self.served: list[tuple[ServerConfig, Path]] = []

    def notify(self, paths: Sequence[Path]) -> Sequence[Path]:
        self.notified.extend(paths)
        return paths

    def serve(self, config: ServerConfig, root: Path) -> None:
        self.served.append((config, root))


def png_bytes(size: tuple[int, int] = (32, 32), color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def write(root: Path, relative: str, contents: str | bytes) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(contents, bytes):
        path.write_bytes(contents)
    else:
        path.write_text(contents, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's THEMECTL_* environment out of every test."""
    import os

    for key in list(os.environ):
        if key.startswith("THEMECTL_"):
            monkeypatch.delenv(key)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Temporary project with a settings file and one complete sample theme.

    This is the single source of truth for the sample theme layout.
    """
    theme = f"themes/{THEME}"
    write(tmp_path, "config.json", json.dumps({"theme": THEME, "locals": {"title": "Sample"}}))
    write(
        tmp_path,
        f"{theme}/config.json",
        json.dumps({"name": "My Theme", "author": "Jane Doe", "author-uri": "https://example.com"}),
    )
    write(
        tmp_path,
        f"{theme}/templates/index.j2",
        "<?php _e('Hello', $text_domain); ?>\n<title>{{ title }}</title>\n",
    )
    write(tmp_path, f"{theme}/templates/partials/footer.j2", "<footer>{{ version }}</footer>\n")
    write(tmp_path, f"{theme}/stylesheets/style.scss", "$brand: #336699;\nbody { color: $brand; }\n")
    write(tmp_path, f"{theme}/javascripts/app.js", "var app = 1;\n")
    write(tmp_path, f"{theme}/javascripts/jquery.js", "var jQuery = {};\n")
    write(tmp_path, f"{theme}/languages/fr_FR.po", SAMPLE_PO)
    write(tmp_path, f"{theme}/images/logo.png", png_bytes())
    write(tmp_path, f"{theme}/functions.php", "<?php load_theme_textdomain($text_domain); ?>\n")
    write(tmp_path, f"{theme}/readme.txt", "Sample theme\n")
    write(tmp_path, f"{theme}/inc/helpers.php", "<?php // helpers\n")
    return tmp_path


@pytest.fixture
def settings(project: Path) -> ThemeSettings:
    """Settings for the sample project; ``public/`` absent, not production."""
    return ThemeSettings.from_cli(project_root=project)


@pytest.fixture
def dev_server() -> RecordingDevServer:
    return RecordingDevServer()


@pytest.fixture
def build_context(settings: ThemeSettings, dev_server: RecordingDevServer) -> BuildContext:
    return BuildContext.from_settings(settings, server=dev_server)


@pytest.fixture
def _isolated_project(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the sample project so the CLI picks up its config.json.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes.
    """
    monkeypatch.chdir(project)


def destination(root: Path) -> Path:
    return root / "public" / "wp-content" / "themes" / THEME
