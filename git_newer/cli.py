from __future__ import annotations

import logging
from pathlib import Path
import typer

from git_newer import __version__
from git_newer.commands import CommandTaskError, register_commands
from git_newer.config import ConfigStore, load_options, load_task_file
from git_newer.git_scope import GitScopeError, discover_changes
from git_newer.runner import TaskError, TaskRunner
from git_newer.tasks import register_tasks
from git_newer.vault import SnapshotNotFoundError

app = typer.Typer(help="git-newer: run tasks against files changed since a git ref")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main() -> None:
    """git-newer command group."""


@app.command()
def version() -> None:
    typer.echo(__version__)


@app.command()
def run(
    specs: list[str] = typer.Argument(..., help="Task specs, e.g. gitnewer:lint or gitnewer-prefix:build:dist"),
    config: str = typer.Option("gitnewer.yml", help="YAML task file"),
    branch: str | None = typer.Option(None, help="Diff against this ref (default: HEAD)"),
    diff_filter: str | None = typer.Option(None, help="git --diff-filter value (default: ACM)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    _setup_logging(verbose)

    config_path = Path(config).resolve()
    try:
        task_file = load_task_file(config_path)
    except (FileNotFoundError, ValueError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2)

    # Globs in the task file are relative to the file's directory.
    cwd = config_path.parent
    runner = TaskRunner(ConfigStore(task_file.config))
    register_commands(runner, task_file.commands, cwd=cwd)
    register_tasks(runner, discover=discover_changes, cwd=cwd, branch=branch, diff_filter=diff_filter)

    try:
        runner.run(specs)
    except CommandTaskError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except (TaskError, GitScopeError, SnapshotNotFoundError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2)

    typer.secho(f"Done: {', '.join(runner.history)}", fg=typer.colors.GREEN)


@app.command()
def changed(
    path: str = typer.Option(".", help="Path inside the repository"),
    branch: str | None = typer.Option(None, help="Diff against this ref (default: HEAD)"),
    diff_filter: str | None = typer.Option(None, help="git --diff-filter value (default: ACM)"),
) -> None:
    """Print the absolute paths of files changed since the ref."""
    root = Path(path).resolve()
    if not root.exists():
        typer.secho(f"Path does not exist: {root}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    options = load_options(ConfigStore(), "gitnewer", branch=branch, diff_filter=diff_filter)
    try:
        changes = discover_changes(branch=options.branch, diff_filter=options.diff_filter, cwd=root)
    except GitScopeError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=2)

    for changed_path in changes.paths:
        typer.echo(changed_path)


if __name__ == "__main__":
    app()
