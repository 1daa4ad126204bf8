from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable

from git_newer.config import load_options
from git_newer.file_filter import rewrite_file_spec
from git_newer.git_scope import discover_changes
from git_newer.models import ChangeSet, MatchMode
from git_newer.runner import FatalError, TaskContext, TaskRunner
from git_newer.vault import ConfigVault

logger = logging.getLogger(__name__)

POSTRUN_TASK = "gitnewer-postrun"
SKIPPED_TARGET = re.compile(r"^_|^options$")

ChangeDiscovery = Callable[..., ChangeSet]


def configured_targets(config: object) -> list[str]:
    """Target names of a task config, minus ``options`` and ``_private`` keys."""
    if not isinstance(config, dict):
        return []
    return [name for name in config if not SKIPPED_TARGET.search(str(name))]


def create_task(
    vault: ConfigVault,
    mode: MatchMode = MatchMode.EXACT,
    discover: ChangeDiscovery = discover_changes,
    cwd: Path | str | None = None,
    branch: str | None = None,
    diff_filter: str | None = None,
):
    def gitnewer(ctx: TaskContext, task_name: str | None = None, target_name: str | None = None, *args: str) -> None:
        prefix = ctx.name
        if not task_name:
            raise FatalError(f'The "{prefix}" task needs a task name, e.g. "{prefix}:lint"')

        if not target_name:
            task_config = ctx.config.get([task_name])
            if not task_config:
                raise FatalError(f'The "{prefix}" prefix is not supported for aliases')
            ctx.run([f"{prefix}:{task_name}:{name}" for name in configured_targets(task_config)])
            return

        original = ctx.config.get([task_name, target_name])
        if original is None:
            raise FatalError(f'Target "{task_name}:{target_name}" is not configured')

        options = load_options(ctx.config, prefix, branch=branch, diff_filter=diff_filter)
        handle = vault.store(original)

        try:
            changes = discover(branch=options.branch, diff_filter=options.diff_filter, cwd=cwd)
            logger.debug("Modified files: %s", ", ".join(changes.paths))
            config, matched = rewrite_file_spec(original, changes.paths, mode, target_name, cwd=cwd)
        except Exception:
            vault.take(handle)
            raise

        if not matched:
            vault.take(handle)
            logger.debug('No changed files for "%s:%s", skipping', task_name, target_name)
            return

        ctx.config.set([task_name, target_name], config)

        qualified = f"{task_name}:{target_name}"
        extra = ":".join(args)
        ctx.run(
            [
                qualified + (f":{extra}" if extra else ""),
                f"{POSTRUN_TASK}:{qualified}:{handle}",
            ]
        )

    return gitnewer


def create_postrun_task(vault: ConfigVault):
    def postrun(ctx: TaskContext, task_name: str, target_name: str, handle: str) -> None:
        ctx.config.set([task_name, target_name], vault.take(handle))

    return postrun


def register_tasks(
    runner: TaskRunner,
    vault: ConfigVault | None = None,
    discover: ChangeDiscovery = discover_changes,
    cwd: Path | str | None = None,
    branch: str | None = None,
    diff_filter: str | None = None,
) -> ConfigVault:
    vault = vault if vault is not None else ConfigVault()
    shared = dict(discover=discover, cwd=cwd, branch=branch, diff_filter=diff_filter)

    runner.register(
        "gitnewer",
        create_task(vault, MatchMode.EXACT, **shared),
        "Run a task with only those source files that have been modified since last git commit.",
    )
    runner.register(
        "gitnewer-prefix",
        create_task(vault, MatchMode.PREFIX, **shared),
        "Run a task with only those source files that have been modified since last git commit.",
    )
    runner.register(
        POSTRUN_TASK,
        create_postrun_task(vault),
        "Internal task.",
        always_run=True,
    )
    return vault
