"""Tests for the per-task commands and the ``tasks`` listing."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from themectl.cli import cli
from themectl.services.registry import TASKS
from tests.conftest import destination


@pytest.mark.usefixtures("_isolated_project")
class TestTaskCommands:
    def test_compile_javascripts(self, cli_runner: CliRunner, project: Path) -> None:
        (project / "public").mkdir()
        result = cli_runner.invoke(cli, ["compileJavascripts"])
        assert result.exit_code == 0, result.output
        assert "compileJavascripts" in result.stdout
        core = destination(project) / "core.js"
        assert core.read_text().startswith("var jQuery")

    def test_json_output(self, cli_runner: CliRunner, project: Path) -> None:
        (project / "public").mkdir()
        result = cli_runner.invoke(cli, ["--json", "compileFunctions"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["ok"] is True
        assert payload["op"] == "compileFunctions"
        entry = payload["data"]["tasks"][0]
        assert entry["task"] == "compileFunctions"
        assert entry["data"]["domain"] == "my-theme"

    def test_production_skips_install(self, cli_runner: CliRunner, project: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "--production", "compileStylesheets"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [t["task"] for t in payload["data"]["tasks"]] == ["compileStylesheets"]
        assert not (project / "public" / "wp-admin").exists()

    def test_sass_error_is_a_warning(self, cli_runner: CliRunner, project: Path) -> None:
        (project / "public").mkdir()
        (project / "themes/my-theme/stylesheets/style.scss").write_text("body { color: ; ")
        result = cli_runner.invoke(cli, ["compileStylesheets"])
        assert result.exit_code == 0, result.output
        assert "WARNING: compileStylesheets:" in result.stderr
        assert not (destination(project) / "style.css").exists()

    def test_theme_not_configured(self, cli_runner: CliRunner, project: Path) -> None:
        (project / "config.json").write_text("{}")
        (project / "public").mkdir()
        result = cli_runner.invoke(cli, ["compileTemplates"])
        assert result.exit_code == 1
        assert "No theme configured" in result.stderr

    def test_hard_clean(self, cli_runner: CliRunner, project: Path) -> None:
        (project / "public").mkdir()
        assert cli_runner.invoke(cli, ["compileMisc"]).exit_code == 0
        assert destination(project).is_dir()
        result = cli_runner.invoke(cli, ["hard-clean"])
        assert result.exit_code == 0, result.output
        assert not destination(project).exists()


class TestTaskHelp:
    def test_requires_listed(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["compilePOT", "--help"])
        assert result.exit_code == 0
        assert "Requires: compileTemplates." in result.output

    def test_examples_flag(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["compile", "--examples"])
        assert result.exit_code == 0
        assert "themectl --production compile" in result.output

    def test_examples_only_where_declared(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["compileImages", "--examples"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_project")
class TestTasksListing:
    def test_lists_every_task(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "tasks"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        names = [item["name"] for item in payload["data"]["items"]]
        assert names == list(TASKS)
        assert payload["data"]["count"] == len(TASKS)

    def test_install_edges_when_public_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "tasks"])
        items = {item["name"]: item for item in json.loads(result.stdout)["data"]["items"]}
        assert "install" in items["compile"]["requires"]
        assert "install" in items["compileTemplates"]["requires"]

    def test_no_install_edges_in_production(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "--production", "tasks"])
        items = {item["name"]: item for item in json.loads(result.stdout)["data"]["items"]}
        assert "install" not in items["compile"]["requires"]

    def test_table_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["tasks"])
        assert result.exit_code == 0
        assert "compileStylesheets" in result.stdout
        assert "install" in result.stdout
