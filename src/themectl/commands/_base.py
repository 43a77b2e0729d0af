"""Click base classes for themectl commands.

Every build task becomes a subcommand generated from the task registry, so
the usage examples for a task live next to its command rather than in its
help text. ``themectl compile --examples`` prints them and exits; commands
declared without examples get no such flag.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Give *cmd* an ``--examples`` flag that runs before any other option."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class ThemeCommand(click.Command):
    """A themectl subcommand: one build task or a long-running mode."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class ThemeGroup(click.Group):
    """The themectl root group.

    Subcommands default to :class:`ThemeCommand` and are listed in
    registration order, so ``--help`` reads like the build pipeline:
    install steps, compilers, aggregates, then the long-running modes.
    """

    command_class = ThemeCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(self.commands)
