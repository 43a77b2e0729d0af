"""TaskRunner — executes a task closure on a thread pool.

The graph may be given as a factory; it is then rebuilt for every run, so
conditional edges such as the install prerequisite follow the filesystem.
A task is submitted only once every prerequisite in the closure has
succeeded. A failure never stops independent siblings; tasks downstream of
it are reported as skipped with ``DEPENDENCY_FAILED``.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any

import structlog

from themectl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from themectl.infrastructure.graph.engine import TaskGraph
    from themectl.services.context import BuildContext
    from themectl.services.registry import TaskSpec

log = structlog.get_logger(__name__)


class TaskRunner:
    def __init__(
        self,
        ctx: BuildContext,
        graph: TaskGraph | Callable[[], TaskGraph],
        tasks: Mapping[str, TaskSpec],
        *,
        max_workers: int = 4,
    ) -> None:
        self._ctx = ctx
        self._graph = graph
        self._tasks = tasks
        self._max_workers = max_workers

    def graph(self) -> TaskGraph:
        """The graph for the next run; a factory is asked again on every call."""
        return self._graph() if callable(self._graph) else self._graph

    @property
    def context(self) -> BuildContext:
        return self._ctx

    def run(self, targets: Sequence[str]) -> ServiceResult:
        """Run *targets* and everything they require.

        Raises:
            UnknownTaskError: A target is not a declared task.
        """
        targets = list(dict.fromkeys(targets))
        graph = self.graph()
        order = [name for generation in graph.plan(targets) for name in generation]
        closure = set(order)
        pending = {name: graph.requirements(name) & closure for name in order}
        results: dict[str, ServiceResult] = {}
        started = time.perf_counter()

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            running: dict[Future[ServiceResult], str] = {}
            while pending or running:
                ready = [n for n in order if n in pending and pending[n].issubset(results)]
                for name in ready:
                    requires = pending.pop(name)
                    failed = sorted(r for r in requires if not results[r].ok)
                    spec = self._tasks[name]
                    if failed:
                        log.warning("task.skipped", task=name, failed=failed)
                        results[name] = ServiceResult.failure(
                            name,
                            "DEPENDENCY_FAILED",
                            f"Skipped because {', '.join(failed)} failed",
                            failed=failed,
                        )
                    elif spec.run is None:
                        results[name] = ServiceResult(
                            ok=True, op=name, data={"requires": sorted(requires)}
                        )
                    else:
                        running[pool.submit(self._execute, spec)] = name
                if ready:
                    continue
                if not running:
                    break
                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    results[running.pop(future)] = future.result()

        elapsed = round((time.perf_counter() - started) * 1000, 2)
        return self._aggregate(targets, order, results, elapsed)

    def _execute(self, spec: TaskSpec) -> ServiceResult:
        assert spec.run is not None
        log.info("task.start", task=spec.name)
        started = time.perf_counter()
        try:
            result = spec.run(self._ctx)
        except Exception as exc:
            log.warning("task.failed", task=spec.name, error=str(exc), exc_info=True)
            result = ServiceResult.failure(
                spec.name,
                getattr(exc, "code", "TASK_FAILED"),
                str(exc) or type(exc).__name__,
                exception=type(exc).__name__,
            )
        duration = round((time.perf_counter() - started) * 1000, 2)
        log.info("task.complete", task=spec.name, ok=result.ok, duration_ms=duration)
        return result.model_copy(update={"meta": {**(result.meta or {}), "duration_ms": duration}})

    @staticmethod
    def _aggregate(
        targets: list[str],
        order: list[str],
        results: Mapping[str, ServiceResult],
        elapsed: float,
    ) -> ServiceResult:
        op = "+".join(targets)
        summary: list[dict[str, Any]] = []
        warnings: list[str] = []
        failed: list[str] = []
        skipped: list[str] = []
        for name in order:
            result = results[name]
            entry: dict[str, Any] = {"task": name, "ok": result.ok, "data": result.data}
            if result.meta and "duration_ms" in result.meta:
                entry["duration_ms"] = result.meta["duration_ms"]
            if result.error is not None:
                entry["error"] = result.error.model_dump()
                if result.error.code == "DEPENDENCY_FAILED":
                    skipped.append(name)
                else:
                    failed.append(name)
            summary.append(entry)
            warnings.extend(f"{name}: {warning}" for warning in result.warnings)

        data = {"tasks": summary, "failed": failed, "skipped": skipped}
        meta = {"duration_ms": elapsed}
        if not failed and not skipped:
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings, meta=meta)

        first = results[failed[0]] if failed else results[skipped[0]]
        assert first.error is not None
        error = ServiceError(
            code=first.error.code,
            message=f"{first.op}: {first.error.message}",
            detail={"failed": failed, "skipped": skipped},
        )
        return ServiceResult(ok=False, op=op, data=data, warnings=warnings, error=error, meta=meta)
