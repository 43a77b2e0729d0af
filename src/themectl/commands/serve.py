"""Commands for the long-running modes: watch, live-reload and default."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import click

from themectl.commands._base import ThemeCommand

if TYPE_CHECKING:
    from themectl.commands._context import AppContext
    from themectl.services.result import ServiceResult


def _watch(app: AppContext, stop_event: threading.Event | None = None) -> ServiceResult:
    from themectl.services.watch import WatchService

    return app.invoke(
        "watch",
        lambda: WatchService(app.build).watch(
            app.runner, stop_event=stop_event, on_result=app.report
        ),
    )


def _serve(app: AppContext) -> ServiceResult:
    from themectl.services.result import ServiceResult

    settings = app.settings
    app.build.server.serve(settings.server, settings.public_root)
    return ServiceResult(
        ok=True,
        op="live-reload",
        data={
            "host": settings.server.host,
            "port": settings.server.port,
            "proxy": settings.server.proxy,
        },
    )


@click.command(
    cls=ThemeCommand,
    examples="""\
  themectl watch
  themectl -v watch""",
)
@click.pass_obj
def watch(app: AppContext) -> None:
    """Recompile theme sources as they change, until interrupted."""
    app.emit(_watch(app))


@click.command(
    "live-reload",
    cls=ThemeCommand,
    examples="""\
  themectl live-reload
  themectl --port 3000 --open live-reload
  themectl --proxy http://localhost:8888 live-reload""",
)
@click.pass_obj
def live_reload(app: AppContext) -> None:
    """Serve public/ (or proxy a server) and reload browsers on compiled output."""
    app.emit(_serve(app))


@click.command(
    cls=ThemeCommand,
    examples="""\
  themectl
  themectl default
  themectl --production
  themectl --proxy http://localhost:8888 --open""",
)
@click.pass_obj
def default(app: AppContext) -> None:
    """Compile everything; outside production keep watching (and serving with --proxy)."""
    result = app.run("compile")
    if not result.ok or app.settings.production:
        app.emit(result)
        return
    app.report(result)

    if not app.settings.server.proxy:
        app.emit(_watch(app))
        return

    stop = threading.Event()
    watcher = threading.Thread(
        target=_watch, args=(app, stop), name="themectl-watch", daemon=True
    )
    watcher.start()
    try:
        served = _serve(app)
    finally:
        stop.set()
        watcher.join(timeout=5)
    app.emit(served)
