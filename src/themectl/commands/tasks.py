"""Commands: one subcommand per registered task, plus the ``tasks`` listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from themectl.commands._base import ThemeCommand
from themectl.services.registry import TASKS, TaskSpec

if TYPE_CHECKING:
    from themectl.commands._context import AppContext

_EXAMPLES: dict[str, str] = {
    "compile": """\
  themectl compile
  themectl --production compile
  themectl --theme my-theme --json compile""",
    "install": """\
  themectl install
  themectl --set latestWordpressURL=https://wordpress.org/wordpress-6.5.zip install""",
    "compileTemplates": """\
  themectl compileTemplates
  themectl --set locals.title=Staging compileTemplates""",
    "compilePOT": """\
  themectl compilePOT
  themectl --domain my-theme compilePOT""",
    "hard-clean": """\
  themectl hard-clean
  themectl hard-clean && themectl compile""",
}


def _make_task_command(spec: TaskSpec) -> click.Command:
    @click.pass_obj
    def run_task(app: AppContext) -> None:
        app.emit(app.run(spec.name))

    help_text = spec.description
    if spec.requires:
        help_text += f"\n\nRequires: {', '.join(spec.requires)}."
    return ThemeCommand(
        name=spec.name,
        callback=run_task,
        help=help_text,
        short_help=spec.description,
        examples=_EXAMPLES.get(spec.name),
    )


def task_commands() -> list[click.Command]:
    """A Click command for every entry in the task registry."""
    return [_make_task_command(spec) for spec in TASKS.values()]


@click.command(
    cls=ThemeCommand,
    examples="""\
  themectl tasks
  themectl --json tasks""",
)
@click.pass_obj
def tasks(app: AppContext) -> None:
    """List every task with its prerequisites."""
    from themectl.services.registry import build_task_graph
    from themectl.services.result import ServiceResult

    graph = build_task_graph(app.settings)
    items = [
        {
            "name": spec.name,
            "requires": sorted(graph.requirements(spec.name)),
            "description": spec.description,
        }
        for spec in TASKS.values()
    ]
    app.emit(ServiceResult(ok=True, op="tasks", data={"items": items, "count": len(items)}))
