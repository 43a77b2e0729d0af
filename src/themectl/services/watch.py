"""WatchService — rerun compilers when theme sources change.

File changes under the theme root are batched by watchfiles, matched
against each trigger's globs, and the union of triggered tasks runs as one
pass through the :class:`TaskRunner`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import watchfiles

from themectl.infrastructure.filesystem import path_matches
from themectl.services.base import BaseService, TaskError
from themectl.services.result import ServiceResult

if TYPE_CHECKING:
    import threading

    from themectl.domain.paths import PathTable
    from themectl.services.runner import TaskRunner

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WatchTrigger:
    patterns: tuple[str, ...]
    tasks: tuple[str, ...]


def watch_triggers(paths: PathTable) -> list[WatchTrigger]:
    return [
        WatchTrigger((paths.stylesheet_sources, paths.config), ("compileStylesheets",)),
        WatchTrigger((paths.templates,), ("compileTemplates", "compilePOT")),
        WatchTrigger((paths.javascripts,), ("compileJavascripts",)),
        WatchTrigger((paths.images,), ("compileImages",)),
        WatchTrigger((paths.functions,), ("compileFunctions",)),
        WatchTrigger((paths.languages,), ("compilePO",)),
    ]


def tasks_for_changes(changed: Iterable[str], triggers: Sequence[WatchTrigger]) -> list[str]:
    """Tasks triggered by the project-relative *changed* paths, in trigger order."""
    changed = list(changed)
    tasks: list[str] = []
    for trigger in triggers:
        if any(path_matches(path, trigger.patterns) for path in changed):
            tasks.extend(t for t in trigger.tasks if t not in tasks)
    return tasks


class WatchService(BaseService):
    def watch(
        self,
        runner: TaskRunner,
        *,
        stop_event: threading.Event | None = None,
        on_result: Callable[[ServiceResult], None] | None = None,
    ) -> ServiceResult:
        """Block until interrupted (or *stop_event* is set), rerunning tasks on change."""
        paths = self.paths
        triggers = watch_triggers(paths)
        source = self._abs(paths.root)
        if not source.is_dir():
            msg = f"Theme source folder {paths.root} does not exist"
            raise TaskError(msg)
        runs = 0
        log.info("watch.start", root=paths.root)
        for changes in watchfiles.watch(source, stop_event=stop_event, raise_interrupt=False):
            changed = self._changed_paths(changes)
            tasks = tasks_for_changes(changed, triggers)
            log.debug("watch.changes", files=changed, tasks=tasks)
            if not tasks:
                continue
            result = runner.run(tasks)
            runs += 1
            if on_result is not None:
                on_result(result)
        log.info("watch.stop", runs=runs)
        return ServiceResult(ok=True, op="watch", data={"root": paths.root, "runs": runs})

    def _changed_paths(self, changes: Iterable[tuple[watchfiles.Change, str]]) -> list[str]:
        root = self.root.resolve()
        changed: set[str] = set()
        for _change, raw in changes:
            path = Path(raw).resolve()
            if path.is_relative_to(root):
                changed.add(path.relative_to(root).as_posix())
        return sorted(changed)
