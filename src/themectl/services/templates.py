"""TemplateService — render the theme's Jinja2 templates to PHP."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import PurePosixPath
from typing import Any

import structlog
from jinja2 import Environment, TemplateError

from themectl.domain.assets import OutputFile, SourceFile, Transformed
from themectl.infrastructure.filesystem import glob_base, read_glob
from themectl.infrastructure.templates import build_theme_environment
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult

log = structlog.get_logger(__name__)

OUTPUT_SUFFIX = ".php"


def output_name(path: PurePosixPath) -> PurePosixPath:
    """``partials/header.j2`` -> ``partials/header.php``."""
    return path.with_suffix(OUTPUT_SUFFIX)


def render_templates(
    files: Sequence[SourceFile],
    env: Environment,
    template_locals: Mapping[str, Any],
) -> Transformed:
    """Render each template with *template_locals* bound.

    Sources are compiled from their contents; *env*'s loader only serves
    ``extends``/``include`` lookups. A template that fails to parse or
    render is reported as a warning and produces no output.
    """
    result = Transformed()
    for source in files:
        try:
            rendered = env.from_string(source.text()).render(**template_locals)
        except (TemplateError, UnicodeDecodeError) as exc:
            result.warnings.append(f"{source.path}: {exc}")
            continue
        result.outputs.append(OutputFile.from_text(output_name(source.path), rendered))
    return result


class TemplateService(BaseService):
    """Compile ``templates/**/*.j2`` into the installed theme."""

    def compile_templates(self) -> ServiceResult:
        paths = self.paths
        files = read_glob(self.root, paths.templates)
        env = build_theme_environment(self._abs(glob_base(paths.templates).as_posix()))
        transformed = render_templates(files, env, self.settings.template_locals)
        written = self._publish(paths.destination, transformed.outputs)
        log.debug("templates.compiled", count=len(written), rejected=len(transformed.warnings))
        return ServiceResult(
            ok=True,
            op="compileTemplates",
            data={"files": self._relative(written), "count": len(written)},
            warnings=transformed.warnings,
        )
