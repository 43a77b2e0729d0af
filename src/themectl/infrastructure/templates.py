"""Shared Jinja2 template loading with per-project override support."""

from __future__ import annotations

from pathlib import Path

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader


def build_template_environment(group: str, *, project_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with project overrides before packaged defaults.

    Overrides are loaded from ``.themectl/templates/`` inside the project.
    Both a namespaced directory (for example ``.themectl/templates/stylesheets/``)
    and the shared root are searched.
    """
    loaders: list[BaseLoader] = []
    if project_root is not None:
        template_root = project_root / ".themectl" / "templates"
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("themectl", f"templates/{group}"))
    return Environment(loader=ChoiceLoader(loaders), keep_trailing_newline=True)


def build_theme_environment(template_dir: Path) -> Environment:
    """Environment for a theme's own templates, rooted at *template_dir*.

    Templates may ``extends``/``include`` each other by their path relative
    to that directory.
    """
    return Environment(loader=FileSystemLoader(str(template_dir)), keep_trailing_newline=True)
