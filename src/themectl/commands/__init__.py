"""Subcommand modules for themectl.

Provides register_commands() which uses deferred imports to keep
``themectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every task command plus the long-running modes on the root group.

    One command per registered task (``compile``, ``install``, ...), the
    ``tasks`` listing, and ``watch``, ``live-reload`` and ``default``.
    """
    # --- One-shot tasks ---
    from themectl.commands.tasks import task_commands, tasks

    for command in task_commands():
        cli.add_command(command)
    cli.add_command(tasks)

    # --- Long-running modes ---
    from themectl.commands.serve import default, live_reload, watch

    cli.add_command(watch)
    cli.add_command(live_reload)
    cli.add_command(default)
