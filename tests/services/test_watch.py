"""Tests for watch triggers and the watch loop."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
import watchfiles

from themectl.config.settings import ThemeSettings
from themectl.domain.paths import build_path_table
from themectl.services import install
from themectl.services.base import TaskError
from themectl.services.context import BuildContext
from themectl.services.registry import TASKS, build_task_graph
from themectl.services.result import ServiceResult
from themectl.services.runner import TaskRunner
from themectl.services.watch import WatchService, tasks_for_changes, watch_triggers

TRIGGERS = watch_triggers(build_path_table("my-theme"))


class FakeRunner:
    def __init__(self) -> None:
        self.runs: list[list[str]] = []

    def run(self, targets: Sequence[str]) -> ServiceResult:
        self.runs.append(list(targets))
        return ServiceResult(ok=True, op="+".join(targets))


class TestTasksForChanges:
    @pytest.mark.parametrize(
        ("changed", "tasks"),
        [
            ("themes/my-theme/stylesheets/partials/_nav.scss", ["compileStylesheets"]),
            ("themes/my-theme/config.json", ["compileStylesheets"]),
            ("themes/my-theme/templates/index.j2", ["compileTemplates", "compilePOT"]),
            ("themes/my-theme/javascripts/app.js", ["compileJavascripts"]),
            ("themes/my-theme/images/logo.png", ["compileImages"]),
            ("themes/my-theme/functions.php", ["compileFunctions"]),
            ("themes/my-theme/languages/fr_FR.po", ["compilePO"]),
            ("themes/my-theme/readme.txt", []),
            ("themes/my-theme/languages/my-theme.pot", []),
        ],
    )
    def test_single_change(self, changed: str, tasks: list[str]) -> None:
        assert tasks_for_changes([changed], TRIGGERS) == tasks

    def test_batch_is_deduplicated(self) -> None:
        changed = [
            "themes/my-theme/javascripts/a.js",
            "themes/my-theme/stylesheets/style.scss",
            "themes/my-theme/javascripts/b.js",
        ]
        assert tasks_for_changes(changed, TRIGGERS) == ["compileStylesheets", "compileJavascripts"]


class TestWatchService:
    def _fake_watch(self, batches: list[set[tuple[watchfiles.Change, str]]]) -> Any:
        def fake(*paths: Path, **kwargs: Any) -> Iterator[set[tuple[watchfiles.Change, str]]]:
            yield from batches

        return fake

    def test_runs_triggered_tasks(
        self, build_context: BuildContext, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        theme = project / "themes" / "my-theme"
        batches = [
            {(watchfiles.Change.modified, str(theme / "javascripts" / "app.js"))},
            {(watchfiles.Change.added, str(theme / "readme.txt"))},
            {
                (watchfiles.Change.modified, str(theme / "templates" / "index.j2")),
                (watchfiles.Change.modified, str(theme / "functions.php")),
            },
        ]
        monkeypatch.setattr(watchfiles, "watch", self._fake_watch(batches))
        runner = FakeRunner()
        reported: list[ServiceResult] = []

        result = WatchService(build_context).watch(runner, on_result=reported.append)  # type: ignore[arg-type]

        assert runner.runs == [
            ["compileJavascripts"],
            ["compileTemplates", "compilePOT", "compileFunctions"],
        ]
        assert [r.op for r in reported] == [
            "compileJavascripts",
            "compileTemplates+compilePOT+compileFunctions",
        ]
        assert result.ok
        assert result.data == {"root": "themes/my-theme", "runs": 2}

    def test_missing_theme_folder(self, tmp_path: Path) -> None:
        settings = ThemeSettings.from_cli(project_root=tmp_path, theme="ghost")
        ctx = BuildContext.from_settings(settings)
        with pytest.raises(TaskError, match="does not exist"):
            WatchService(ctx).watch(FakeRunner())  # type: ignore[arg-type]


class TestWatchWithRegistryRunner:
    def test_rerun_after_install_does_not_reinstall(
        self, build_context: BuildContext, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The install edges are decided per run, not when the runner is built."""
        downloads: list[str] = []

        def fake_download(url: str, target: Path, **kwargs: Any) -> int:
            downloads.append(url)
            raise AssertionError("WordPress must not be downloaded again")

        monkeypatch.setattr(install, "download_file", fake_download)
        runner = TaskRunner(
            build_context, lambda: build_task_graph(build_context.settings), TASKS
        )
        assert "install" in runner.graph().requirements("compileJavascripts")

        (project / "public").mkdir()
        script = project / "themes" / "my-theme" / "javascripts" / "app.js"
        monkeypatch.setattr(
            watchfiles,
            "watch",
            self._fake_watch([{(watchfiles.Change.modified, str(script))}]),
        )
        reported: list[ServiceResult] = []

        result = WatchService(build_context).watch(runner, on_result=reported.append)

        assert result.ok
        assert downloads == []
        assert [r.ok for r in reported] == [True]
        assert [t["task"] for t in reported[0].data["tasks"]] == ["compileJavascripts"]
        assert (project / "public/wp-content/themes/my-theme/core.js").is_file()

    def _fake_watch(self, batches: list[set[tuple[watchfiles.Change, str]]]) -> Any:
        def fake(*paths: Path, **kwargs: Any) -> Iterator[set[tuple[watchfiles.Change, str]]]:
            yield from batches

        return fake
