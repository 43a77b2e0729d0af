"""Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Task runs (results carrying a per-task summary) get a status table; the
``tasks`` listing gets its own table; anything else falls through to a
generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from themectl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from themectl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    renderer = _OP_RENDERERS.get(result.op)
    if renderer is None:
        renderer = _render_run if "failed" in result.data else _render_generic
    renderer(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    if result.ok:
        label = Text("OK", style="themectl.ok")
    else:
        label = Text("ERROR", style="themectl.error")
    parts = [label, Text(f"  {result.op}", style="themectl.op")]
    if not result.ok and result.error is not None:
        parts.append(Text(f" — {result.error.message}"))
    console.print(*parts, sep="")


def _field(console: Console, key: str, value: Any) -> None:
    if isinstance(value, (dict, list)):
        value = _json.dumps(value, separators=(",", ":"))
    console.print(Text(f"  {key}: ", style="themectl.key"), Text(str(value)), sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _task_status(entry: dict[str, Any]) -> Text:
    if entry.get("ok"):
        return Text("ok", style="themectl.ok")
    error = entry.get("error") or {}
    if error.get("code") == "DEPENDENCY_FAILED":
        return Text("skipped", style="themectl.skipped")
    return Text("failed", style="themectl.error")


def _task_summary(entry: dict[str, Any]) -> str:
    error = entry.get("error")
    if error:
        return str(error.get("message", ""))
    data = entry.get("data") or {}
    if "count" in data:
        return f"{data['count']} file(s)"
    if "removed" in data:
        return ", ".join(data["removed"]) or "nothing to remove"
    return ""


# ── Renderers ─────────────────────────────────────────────────────────


def _render_run(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Status line plus one table row per task of the run."""
    _status_line(console, result)
    entries: list[dict[str, Any]] = result.data.get("tasks", [])
    if entries:
        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("Task", style="themectl.task")
        table.add_column("Status")
        table.add_column("Time", justify="right", style="themectl.timing")
        table.add_column("Result")
        for entry in entries:
            duration = entry.get("duration_ms")
            table.add_row(
                entry["task"],
                _task_status(entry),
                f"{duration:.0f} ms" if duration is not None else "",
                _task_summary(entry),
            )
        console.print(table)

    if verbose:
        for entry in entries:
            for path in (entry.get("data") or {}).get("files", []):
                console.print(Text(f"  {path}", style="themectl.path"))
        _render_meta(console, result)
        if result.error is not None and result.error.detail:
            console.print(Text("  detail:", style="dim"))
            for k, v in result.error.detail.items():
                console.print(f"    {k}: {v}")


def _render_task_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Task", style="themectl.task")
    table.add_column("Requires")
    table.add_column("Description")
    for item in result.data.get("items", []):
        table.add_row(item["name"], ", ".join(item["requires"]), item["description"])
    console.print(table)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "tasks": _render_task_list,
}
