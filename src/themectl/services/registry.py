"""Task registry — every named task, its body and its prerequisites.

Task names are the public entry points (``themectl compileStylesheets``).
Aggregate tasks (``install``, ``compile``) have no body; they complete once
their prerequisites do.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from themectl.infrastructure.graph.engine import TaskGraph
from themectl.services.catalogs import CatalogService
from themectl.services.functions import FunctionsService
from themectl.services.images import ImageService
from themectl.services.install import InstallService, needs_install
from themectl.services.javascripts import ScriptService
from themectl.services.misc import MiscService
from themectl.services.stylesheets import StylesheetService
from themectl.services.templates import TemplateService

if TYPE_CHECKING:
    from themectl.config.settings import ThemeSettings
    from themectl.services.context import BuildContext
    from themectl.services.result import ServiceResult

type TaskBody = Callable[[BuildContext], ServiceResult]


@dataclass(frozen=True)
class TaskSpec:
    name: str
    run: TaskBody | None
    requires: tuple[str, ...] = ()
    description: str = ""


INSTALL_STEPS: tuple[str, ...] = ("download", "unzip", "rename", "delete")

COMPILE_TASKS: tuple[str, ...] = (
    "compileTemplates",
    "compileStylesheets",
    "compileJavascripts",
    "compileImages",
    "compileFunctions",
    "compilePOT",
    "compilePO",
    "compileMisc",
)

_SPECS: tuple[TaskSpec, ...] = (
    TaskSpec("download", lambda ctx: InstallService(ctx).download(), (), "Download the WordPress archive into tmp/."),
    TaskSpec("unzip", lambda ctx: InstallService(ctx).unzip(), ("download",), "Unpack the archive into the project root."),
    TaskSpec("rename", lambda ctx: InstallService(ctx).rename(), ("unzip",), "Copy wordpress/ into public/."),
    TaskSpec("delete", lambda ctx: InstallService(ctx).delete(), ("rename",), "Remove wordpress/ and tmp/."),
    TaskSpec("install", None, INSTALL_STEPS, "Create public/ from the latest WordPress release."),
    TaskSpec("compileTemplates", lambda ctx: TemplateService(ctx).compile_templates(), (), "Render Jinja2 templates to PHP."),
    TaskSpec("compileStylesheets", lambda ctx: StylesheetService(ctx).compile_stylesheets(), (), "Compile style.scss into style.css with the theme header."),
    TaskSpec("compileJavascripts", lambda ctx: ScriptService(ctx).compile_javascripts(), (), "Concatenate scripts into core.js."),
    TaskSpec("compileImages", lambda ctx: ImageService(ctx).compile_images(), (), "Compress changed images."),
    TaskSpec("compileFunctions", lambda ctx: FunctionsService(ctx).compile_functions(), (), "Inject the text domain into functions.php."),
    TaskSpec("compilePOT", lambda ctx: CatalogService(ctx).compile_pot(), ("compileTemplates",), "Extract translatable strings into <domain>.pot."),
    TaskSpec("compilePO", lambda ctx: CatalogService(ctx).compile_po(), (), "Compile .po catalogs into .mo files."),
    TaskSpec("compileMisc", lambda ctx: MiscService(ctx).compile_misc(), (), "Copy every other theme file."),
    TaskSpec("compile", None, COMPILE_TASKS, "Compile every asset."),
    TaskSpec("hard-clean", lambda ctx: InstallService(ctx).hard_clean(), (), "Delete public/, wordpress/ and tmp/."),
)

TASKS: dict[str, TaskSpec] = {spec.name: spec for spec in _SPECS}


def build_task_graph(settings: ThemeSettings, tasks: dict[str, TaskSpec] | None = None) -> TaskGraph:
    """Declare the static dependency edges, plus install when it is needed.

    When :func:`needs_install` holds, ``install`` becomes a prerequisite of
    ``compile`` and of each compile task, so no compiler writes into a
    runtime root that does not exist yet.
    """
    specs = TASKS if tasks is None else tasks
    graph = TaskGraph()
    for spec in specs.values():
        graph.add_task(spec.name, requires=spec.requires)
    if "install" in graph and "compile" in graph and needs_install(settings):
        graph.add_requirement("compile", "install")
        for name in COMPILE_TASKS:
            if name in graph:
                graph.add_requirement(name, "install")
    graph.validate()
    return graph
