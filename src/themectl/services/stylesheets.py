"""StylesheetService — compile ``style.scss`` into the theme's ``style.css``.

WordPress identifies a theme by the comment header of ``style.css``. When
the theme ships a ``config.json``, its fields become that header. The
header goes on after minification so it survives production builds.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import rcssmin
import sass
from jinja2 import Environment

from themectl.domain.assets import OutputFile
from themectl.domain.theme import ThemeMeta, load_theme_meta
from themectl.infrastructure.templates import build_template_environment
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult

OUTPUT_NAME = "style.css"
PLUGIN_DIR = "vendor"
HEADER_TEMPLATE = "style_header.css.j2"


def compile_scss(source: str, include_paths: Sequence[Path]) -> str:
    """Compile Sass *source*; ``@import`` resolves against *include_paths*.

    Raises:
        sass.CompileError: Invalid Sass.
    """
    return sass.compile(
        string=source,
        include_paths=[str(p) for p in include_paths],
        output_style="expanded",
    )


def minify_css(css: str) -> str:
    return rcssmin.cssmin(css)


def wrap_with_header(css: str, meta: ThemeMeta, env: Environment) -> str:
    """Prepend the WordPress header built from *meta*."""
    template = env.get_template(HEADER_TEMPLATE)
    return template.render(fields=meta.header_fields(), contents=css)


class StylesheetService(BaseService):
    """Compile the stylesheet entry point with the configured Sass plugins."""

    def plugin_paths(self) -> list[Path]:
        """Include directories of the configured plugins that exist."""
        candidates = (self.root / PLUGIN_DIR / name for name in self.settings.style_plugins)
        return [path for path in candidates if path.is_dir()]

    def missing_plugins(self) -> list[str]:
        """Warnings for configured plugins with no directory under ``vendor/``."""
        missing = [
            name
            for name in self.settings.style_plugins
            if not (self.root / PLUGIN_DIR / name).is_dir()
        ]
        return [f"Style plugin '{name}' not found at {PLUGIN_DIR}/{name}" for name in missing]

    def compile_stylesheets(self) -> ServiceResult:
        paths = self.paths
        entry = self._abs(paths.style_entry)
        if not entry.is_file():
            return ServiceResult(
                ok=True,
                op="compileStylesheets",
                data={"files": [], "count": 0},
                warnings=[f"No stylesheet entry at {paths.style_entry}"],
            )

        plugin_warnings = self.missing_plugins()
        try:
            css = compile_scss(
                entry.read_text(encoding="utf-8"),
                [entry.parent, *self.plugin_paths()],
            )
        except sass.CompileError as exc:
            return ServiceResult(
                ok=True,
                op="compileStylesheets",
                data={"files": [], "count": 0},
                warnings=[f"{paths.style_entry}: {exc}", *plugin_warnings],
            )

        if self.settings.production:
            css = minify_css(css)

        meta = load_theme_meta(self._abs(paths.config))
        if meta is not None:
            env = build_template_environment("stylesheets", project_root=self.root)
            css = wrap_with_header(css, meta.with_default_domain(self.settings.domain), env)

        written = self._publish(paths.destination, [OutputFile.from_text(OUTPUT_NAME, css)])
        return ServiceResult(
            ok=True,
            op="compileStylesheets",
            data={
                "files": self._relative(written),
                "count": len(written),
                "header": meta is not None,
            },
            warnings=plugin_warnings,
        )
