"""Root CLI group for themectl with global flags and command registration."""

from __future__ import annotations

import click

from themectl import __version__
from themectl.commands import register_commands
from themectl.commands._base import ThemeGroup
from themectl.commands._context import AppContext
from themectl.config.settings import ThemeSettings, parse_overrides


def _parse_set(
    _ctx: click.Context, _param: click.Parameter, value: tuple[str, ...]
) -> dict[str, object]:
    try:
        return parse_overrides(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group(
    cls=ThemeGroup,
    invoke_without_command=True,
    examples="""\
  # Compile, then watch (runs the default task)
  themectl

  # One-shot production build of another theme
  themectl --theme storefront --production compile

  # Override nested settings for one run
  themectl --set server.port=3000 --set locals.title=Preview live-reload""",
)
@click.version_option(version=__version__, prog_name="themectl")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--theme", default=None, help="Theme folder under themes/.")
@click.option("--domain", default=None, help="Text domain (default: kebab-cased theme).")
@click.option(
    "--production/--no-production", default=None, help="Minify output and skip install/serve."
)
@click.option("--port", type=int, default=None, help="Dev server port.")
@click.option("--proxy", default=None, help="Proxy this URL instead of serving public/.")
@click.option("--open/--no-open", "open_browser", default=None, help="Open a browser on serve.")
@click.option(
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    callback=_parse_set,
    help="Override any setting (dotted keys nest; values parse as JSON).",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Parallel tasks.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    theme: str | None,
    domain: str | None,
    production: bool | None,
    port: int | None,
    proxy: str | None,
    open_browser: bool | None,
    overrides: dict[str, object],
    workers: int | None,
    verbose: bool,
    log_json: bool,
    json_output: bool,
) -> None:
    """themectl — build a WordPress theme into a local WordPress install."""
    ctx.ensure_object(dict)
    server = {
        key: value
        for key, value in {"port": port, "proxy": proxy, "open": open_browser}.items()
        if value is not None
    }
    settings = ThemeSettings.from_cli(
        config_path=config_path,
        overrides=overrides,
        theme=theme,
        domain=domain,
        production=production,
        server=server or None,
        workers=workers,
        verbose=verbose or None,
        log_json=log_json or None,
        json_output=json_output or None,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        from themectl.commands.serve import default

        ctx.invoke(default)


register_commands(cli)
