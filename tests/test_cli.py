import os
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from git_newer.cli import app
from git_newer.git_scope import GitScopeError
from git_newer.models import ChangeSet

runner = CliRunner()


class _Proc:
    def __init__(self, returncode=0):
        self.returncode = returncode


def _project(tmp_path: Path) -> Path:
    root = tmp_path.resolve()
    for name in ["a.js", "b.js"]:
        (root / name).write_text("x")
    config = root / "gitnewer.yml"
    config.write_text(
        "\n".join(
            [
                "commands:",
                "  lint: eslint --fix",
                "lint:",
                "  app:",
                "    src: ['a.js', 'b.js']",
            ]
        )
    )
    return config


def _changes(root: Path, *names: str) -> ChangeSet:
    return ChangeSet(root=str(root), paths=tuple(os.path.join(str(root), n) for n in names))


@patch("git_newer.commands.subprocess.run")
@patch("git_newer.cli.discover_changes")
def test_run_filters_files_for_command(mock_discover, mock_run, tmp_path: Path):
    config = _project(tmp_path)
    mock_discover.return_value = _changes(config.parent, "a.js")
    mock_run.return_value = _Proc(0)

    result = runner.invoke(app, ["run", "gitnewer:lint:app", "--config", str(config), "--branch", "origin/main"])

    assert result.exit_code == 0, result.output
    assert mock_run.call_args[0][0] == ["eslint", "--fix", "a.js"]
    assert mock_discover.call_args[1]["branch"] == "origin/main"


@patch("git_newer.commands.subprocess.run")
@patch("git_newer.cli.discover_changes")
def test_run_with_no_changes_skips_command(mock_discover, mock_run, tmp_path: Path):
    config = _project(tmp_path)
    mock_discover.return_value = _changes(config.parent)

    result = runner.invoke(app, ["run", "gitnewer:lint:app", "--config", str(config)])

    assert result.exit_code == 0, result.output
    mock_run.assert_not_called()


@patch("git_newer.commands.subprocess.run")
@patch("git_newer.cli.discover_changes")
def test_run_command_failure_exits_1(mock_discover, mock_run, tmp_path: Path):
    config = _project(tmp_path)
    mock_discover.return_value = _changes(config.parent, "b.js")
    mock_run.return_value = _Proc(2)

    result = runner.invoke(app, ["run", "gitnewer:lint:app", "--config", str(config)])

    assert result.exit_code == 1


@patch("git_newer.cli.discover_changes")
def test_run_git_failure_exits_2(mock_discover, tmp_path: Path):
    config = _project(tmp_path)
    mock_discover.side_effect = GitScopeError("not a git repository")

    result = runner.invoke(app, ["run", "gitnewer:lint:app", "--config", str(config)])

    assert result.exit_code == 2
    assert "not a git repository" in result.output


def test_run_missing_task_file_exits_2(tmp_path: Path):
    result = runner.invoke(app, ["run", "gitnewer:lint", "--config", str(tmp_path / "nope.yml")])
    assert result.exit_code == 2


@patch("git_newer.cli.discover_changes")
def test_changed_prints_paths(mock_discover, tmp_path: Path):
    mock_discover.return_value = _changes(tmp_path, "a.js", "lib/b.js")

    result = runner.invoke(app, ["changed", "--path", str(tmp_path), "--diff-filter", "AM"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [os.path.join(str(tmp_path), "a.js"), os.path.join(str(tmp_path), "lib", "b.js")]
    assert mock_discover.call_args[1]["diff_filter"] == "AM"
