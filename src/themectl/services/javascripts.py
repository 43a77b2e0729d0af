"""ScriptService — concatenate theme scripts into one ``core.js``."""

from __future__ import annotations

from collections.abc import Sequence

import rjsmin

from themectl.domain.assets import OutputFile, SourceFile, Transformed
from themectl.infrastructure.filesystem import read_glob
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult

OUTPUT_NAME = "core.js"
FIRST_SCRIPT = "jquery.js"


def order_first(files: Sequence[SourceFile], name: str = FIRST_SCRIPT) -> list[SourceFile]:
    """Move the file whose relative path is *name* to the front.

    Everything else keeps its incoming order.
    """
    head = [f for f in files if f.path.as_posix() == name]
    tail = [f for f in files if f.path.as_posix() != name]
    return head + tail


def concat_scripts(
    files: Sequence[SourceFile],
    *,
    output_name: str = OUTPUT_NAME,
    minify: bool = False,
) -> Transformed:
    """Join *files* with newlines, jQuery first; optionally minify.

    Minification strips whitespace and comments only; identifiers and
    statement structure are left untouched. Undecodable files are skipped
    with a warning.
    """
    result = Transformed()
    chunks: list[str] = []
    for source in order_first(files):
        try:
            chunks.append(source.text())
        except UnicodeDecodeError as exc:
            result.warnings.append(f"{source.path}: {exc}")
    if not chunks:
        return result
    joined = "\n".join(chunks)
    if minify:
        joined = rjsmin.jsmin(joined)
    result.outputs.append(OutputFile.from_text(output_name, joined))
    return result


class ScriptService(BaseService):
    def compile_javascripts(self) -> ServiceResult:
        paths = self.paths
        files = read_glob(self.root, paths.javascripts)
        transformed = concat_scripts(files, minify=self.settings.production)
        written = self._publish(paths.destination, transformed.outputs)
        return ServiceResult(
            ok=True,
            op="compileJavascripts",
            data={
                "files": self._relative(written),
                "count": len(written),
                "sources": [f.path.as_posix() for f in order_first(files)],
            },
            warnings=transformed.warnings,
        )
