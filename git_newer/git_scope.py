from __future__ import annotations

import os
import subprocess
from pathlib import Path

from git_newer.models import ChangeSet


class GitScopeError(RuntimeError):
    pass


def _run_git(args: list[str], cwd: Path | str | None) -> str:
    cmd = ["git", *args]

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise GitScopeError("git is not installed or not available in PATH") from exc

    if proc.returncode != 0:
        stderr = (proc.stderr or "").strip()
        raise GitScopeError(
            f"'{' '.join(cmd)}' failed with exit code {proc.returncode}. {stderr or 'Check the repository and ref.'}"
        )
    return proc.stdout or ""


def get_repo_root(cwd: Path | str | None = None) -> str:
    root = _run_git(["rev-parse", "--show-toplevel"], cwd).strip()
    if not root:
        raise GitScopeError("git rev-parse --show-toplevel returned no repository root")
    return root


def get_changed_files(
    root: str,
    branch: str = "HEAD",
    diff_filter: str = "ACM",
    cwd: Path | str | None = None,
) -> ChangeSet:
    out = _run_git(
        ["-c", "core.quotePath=false", "diff", branch, "--name-only", f"--diff-filter={diff_filter}"],
        cwd if cwd is not None else root,
    )

    paths = []
    for line in out.splitlines():
        p = line.strip()
        if p:
            paths.append(os.path.join(root, p))
    return ChangeSet(root=root, paths=tuple(paths))


def discover_changes(
    branch: str = "HEAD",
    diff_filter: str = "ACM",
    cwd: Path | str | None = None,
) -> ChangeSet:
    """Resolve the repository root, then list files changed against ``branch``."""
    root = get_repo_root(cwd)
    return get_changed_files(root, branch=branch, diff_filter=diff_filter, cwd=cwd)
