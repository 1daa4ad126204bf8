from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence
import copy
import os

import yaml

from git_newer.models import GitNewerOptions


DEFAULT_OPTIONS = {
    "diffFilter": "ACM",
    "branch": "HEAD",
}

KeyPath = Sequence[str] | str


def _split_path(path: KeyPath) -> list[str]:
    if isinstance(path, str):
        return [p for p in path.split(".") if p]
    return [str(p) for p in path]


class ConfigStore:
    """Live, mutable task configuration addressed by key path.

    ``store.get(["lint", "app"])`` and ``store.get("lint.app")`` are
    equivalent. Values are returned as stored; callers that intend to mutate
    should copy first.
    """

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}

    def get(self, path: KeyPath, default: Any = None) -> Any:
        node: Any = self._data
        for key in _split_path(path):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def set(self, path: KeyPath, value: Any) -> None:
        keys = _split_path(path)
        if not keys:
            raise ValueError("Config path must not be empty")
        node = self._data
        for key in keys[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[keys[-1]] = value

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, list, tuple)):
            return False
        sentinel = object()
        return self.get(path, sentinel) is not sentinel

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)


@dataclass
class TaskFile:
    commands: dict[str, str] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)


def load_task_file(path: str | Path) -> TaskFile:
    task_path = Path(path)
    if not task_path.exists():
        raise FileNotFoundError(f"Task file not found: {path}")

    data = yaml.safe_load(task_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Task file {path} must contain a mapping at the top level")

    raw_commands = data.pop("commands", None) or {}
    if not isinstance(raw_commands, dict):
        raise ValueError("Task file 'commands' must be a mapping of task name to command line")

    commands = {str(name): str(cmd) for name, cmd in raw_commands.items()}
    return TaskFile(commands=commands, config=data)


def load_options(
    store: ConfigStore,
    prefix: str,
    branch: str | None = None,
    diff_filter: str | None = None,
) -> GitNewerOptions:
    """Resolve options: explicit args, then environment, then ``<prefix>.options``, then defaults."""
    merged = dict(DEFAULT_OPTIONS)
    configured = store.get([prefix, "options"]) or {}
    if isinstance(configured, dict):
        merged.update({k: v for k, v in configured.items() if v is not None})

    env_branch = (os.getenv("GITNEWER_BRANCH") or "").strip()
    env_filter = (os.getenv("GITNEWER_DIFF_FILTER") or "").strip()
    if env_branch:
        merged["branch"] = env_branch
    if env_filter:
        merged["diffFilter"] = env_filter

    if branch:
        merged["branch"] = branch
    if diff_filter:
        merged["diffFilter"] = diff_filter

    return GitNewerOptions(
        diff_filter=str(merged["diffFilter"]),
        branch=str(merged["branch"]),
    )
