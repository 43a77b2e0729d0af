"""BaseService — foundation for all build tasks.

Every service receives a :class:`BuildContext` at construction time and
resolves project-relative paths through it. Compiled output is written with
:meth:`BaseService._publish`, which also hands the written files to the dev
server bridge.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from themectl.infrastructure.filesystem import write_outputs

if TYPE_CHECKING:
    from themectl.config.settings import ThemeSettings
    from themectl.domain.assets import OutputFile
    from themectl.domain.paths import PathTable
    from themectl.services.context import BuildContext


class TaskError(Exception):
    """A task cannot proceed. ``code`` ends up in the ServiceError."""

    code = "TASK_FAILED"


class ThemeNotConfiguredError(TaskError):
    code = "THEME_NOT_CONFIGURED"

    def __init__(self) -> None:
        super().__init__("No theme configured: set 'theme' in config.json or pass --theme")


class BaseService:
    """Base for task-owning service classes.

    Usage::

        class ScriptService(BaseService):
            def compile_javascripts(self) -> ServiceResult:
                files = read_glob(self.root, self.paths.javascripts)
                ...
    """

    def __init__(self, ctx: BuildContext) -> None:
        self._ctx = ctx

    @property
    def settings(self) -> ThemeSettings:
        return self._ctx.settings

    @property
    def root(self) -> Path:
        return self._ctx.project_root

    @property
    def paths(self) -> PathTable:
        paths = self._ctx.paths
        if paths is None:
            raise ThemeNotConfiguredError
        return paths

    def _abs(self, relative: str) -> Path:
        return self.root / relative

    def _publish(self, destination: str, outputs: Iterable[OutputFile]) -> list[Path]:
        """Write *outputs* under the project-relative *destination* and notify browsers."""
        written = write_outputs(self._abs(destination), outputs)
        self._ctx.server.notify(written)
        return written

    def _relative(self, paths: Iterable[Path]) -> list[str]:
        return [p.relative_to(self.root).as_posix() for p in paths]
