"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy build-context and runner initialization
and centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import click

from themectl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from themectl.config.settings import ThemeSettings
    from themectl.services.context import BuildContext
    from themectl.services.result import ServiceResult
    from themectl.services.runner import TaskRunner


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The build context and
    task runner are created on first use so ``--help`` and ``--version``
    never touch the project.
    """

    def __init__(self, settings: ThemeSettings) -> None:
        self.settings = settings
        self._build: BuildContext | None = None
        self._runner: TaskRunner | None = None

        # Configure structured logging
        from themectl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            announce=settings.server.notify,
        )

    @property
    def build(self) -> BuildContext:
        """The build context (created lazily on first access)."""
        if self._build is None:
            from themectl.services.context import BuildContext

            self._build = BuildContext.from_settings(self.settings)
        return self._build

    @property
    def runner(self) -> TaskRunner:
        """Task runner over the registry; install edges are re-decided on every run."""
        if self._runner is None:
            from themectl.services.registry import TASKS, build_task_graph
            from themectl.services.runner import TaskRunner

            settings = self.settings
            self._runner = TaskRunner(
                self.build,
                lambda: build_task_graph(settings),
                TASKS,
                max_workers=settings.workers,
            )
        return self._runner

    def run(self, *targets: str) -> ServiceResult:
        """Run *targets* through the runner; unknown names become a failed result."""
        from themectl.infrastructure.graph.engine import UnknownTaskError
        from themectl.services.result import ServiceResult

        try:
            return self.runner.run(targets)
        except UnknownTaskError as exc:
            return ServiceResult.failure(
                "+".join(targets), "UNKNOWN_TASK", f"Unknown task: {exc.args[0]}"
            )

    def invoke(self, op: str, action: Callable[[], ServiceResult]) -> ServiceResult:
        """Call *action*, turning a :class:`TaskError` into a failed result."""
        from themectl.services.base import TaskError
        from themectl.services.result import ServiceResult

        try:
            return action()
        except TaskError as exc:
            return ServiceResult.failure(op, exc.code, str(exc))

    def _output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )

    def report(self, result: ServiceResult) -> None:
        """Print *result* without exiting; used between watch-mode runs."""
        settings = self._output_settings()
        output = format_result(result, settings=settings)
        click.echo(output, err=not result.ok)
        # In JSON mode, warnings are already in the serialized payload.
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        self.report(result)
        if not result.ok:
            raise SystemExit(1)
