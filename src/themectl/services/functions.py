"""FunctionsService — bake the text domain into ``functions.php``."""

from __future__ import annotations

from themectl.domain.assets import OutputFile, SourceFile
from themectl.domain.naming import substitute_text_domain, text_domain_header
from themectl.infrastructure.filesystem import read_glob
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult


def patch_functions(source: SourceFile, domain: str) -> OutputFile:
    """Quote every ``$text_domain`` and prepend the global declaration.

    The prologue is added after substitution, so its own ``$text_domain``
    variable survives.
    """
    body = substitute_text_domain(source.text(), domain)
    return OutputFile.from_text(source.path, text_domain_header(domain) + body)


class FunctionsService(BaseService):
    def compile_functions(self) -> ServiceResult:
        paths = self.paths
        files = read_glob(self.root, paths.functions)
        if not files:
            return ServiceResult(
                ok=True,
                op="compileFunctions",
                data={"files": [], "count": 0},
                warnings=[f"No {paths.functions} to patch"],
            )
        domain = self.settings.domain or ""
        written = self._publish(paths.destination, [patch_functions(f, domain) for f in files])
        return ServiceResult(
            ok=True,
            op="compileFunctions",
            data={"files": self._relative(written), "count": len(written), "domain": domain},
        )
