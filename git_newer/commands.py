from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from git_newer.files import target_file_list
from git_newer.runner import TaskContext, TaskError, TaskRunner
from git_newer.tasks import configured_targets

logger = logging.getLogger(__name__)


class CommandTaskError(TaskError):
    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int


def run_command(argv: list[str], cwd: Path | str | None = None) -> CommandResult:
    if not argv:
        raise TaskError("Empty command")
    try:
        proc = subprocess.run(argv, cwd=str(cwd) if cwd is not None else None, check=False)
    except FileNotFoundError as exc:
        raise CommandTaskError(f"Command not found: {argv[0]}", 127) from exc
    return CommandResult(argv=argv, returncode=proc.returncode)


def create_command_task(command: str, cwd: Path | str | None = None):
    """A multi-target task that runs ``command`` with the target's files appended."""

    def command_task(ctx: TaskContext, target_name: str | None = None, *args: str) -> None:
        if not target_name:
            ctx.run([f"{ctx.name}:{name}" for name in configured_targets(ctx.config.get([ctx.name]))])
            return

        config = ctx.config.get([ctx.name, target_name])
        if config is None:
            raise TaskError(f'Target "{ctx.name}:{target_name}" is not configured')

        files = target_file_list(config, target_name, cwd)
        if not files:
            logger.warning('No files for "%s:%s"', ctx.name, target_name)
            return

        argv = [*shlex.split(command), *args, *files]
        result = run_command(argv, cwd)
        if result.returncode != 0:
            raise CommandTaskError(
                f'Task "{ctx.name}:{target_name}" failed with exit code {result.returncode}',
                result.returncode,
            )

    return command_task


def register_commands(runner: TaskRunner, commands: dict[str, str], cwd: Path | str | None = None) -> None:
    for name, command in commands.items():
        runner.register(name, create_command_task(command, cwd), f"Run: {command}")
