"""MiscService — copy theme files no compiler claims."""

from __future__ import annotations

from themectl.domain.assets import OutputFile
from themectl.infrastructure.filesystem import read_glob, write_outputs
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult


class MiscService(BaseService):
    def compile_misc(self) -> ServiceResult:
        """Copy everything matched by the residual glob verbatim.

        Copies are not announced to the dev server.
        """
        paths = self.paths
        files = read_glob(self.root, paths.misc)
        written = write_outputs(
            self._abs(paths.destination),
            (OutputFile(f.path, f.contents) for f in files),
        )
        return ServiceResult(
            ok=True,
            op="compileMisc",
            data={"files": self._relative(written), "count": len(written)},
        )
