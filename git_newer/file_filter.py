from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from git_newer.files import expand_files, normalize_multi_task_files, split_globs
from git_newer.models import FileSpecShape, MatchMode

Expander = Callable[..., list[str]]


def filter_files(
    candidate_globs: str | Iterable[Any],
    changed_paths: Sequence[str],
    mode: MatchMode = MatchMode.EXACT,
    cwd: Path | str | None = None,
    expand: Expander = expand_files,
) -> list[str]:
    """Return the expanded candidates that count as changed.

    Candidates keep the form the expander produced them in and their order.
    ``EXACT`` keeps a candidate whose absolute path is one of ``changed_paths``.
    ``PREFIX`` keeps a candidate if any changed path starts with its absolute
    path, so a directory matches when anything below it changed.
    """
    base = os.path.abspath(str(cwd)) if cwd is not None else os.getcwd()
    changed = list(changed_paths)
    changed_set = set(changed)

    matched: list[str] = []
    for candidate in expand(candidate_globs, cwd):
        full = os.path.normpath(os.path.join(base, candidate))
        if mode is MatchMode.PREFIX:
            if any(path.startswith(full) for path in changed):
                matched.append(candidate)
        elif full in changed_set:
            matched.append(candidate)
    return matched


def detect_shape(config: Any) -> FileSpecShape:
    if not isinstance(config, dict):
        return FileSpecShape.GENERIC

    files = config.get("files")
    if config.get("src"):
        return FileSpecShape.SRC_LIST
    if isinstance(files, str):
        return FileSpecShape.STRING_FILES
    if isinstance(files, list) and files and isinstance(files[0], str):
        return FileSpecShape.LIST_FILES
    if isinstance(files, dict) and "src" in files:
        return FileSpecShape.OBJECT_SRC_FILES
    return FileSpecShape.GENERIC


def rewrite_file_spec(
    config: Any,
    changed_paths: Sequence[str],
    mode: MatchMode,
    target_name: str,
    cwd: Path | str | None = None,
    expand: Expander = expand_files,
) -> tuple[Any, list[str]]:
    """Filter the active file shape of a target config.

    Returns a rewritten deep copy together with the matched files. Only the
    detected shape is touched; everything else in the config is left as is.
    The generic fallback collapses all file groups into a single
    ``{"src": [...]}`` entry, so per-group destinations do not survive.
    A string ``files`` value is split on commas into separate globs.
    """
    shape = detect_shape(config)

    def _filter(globs: Any) -> list[str]:
        return filter_files(globs, changed_paths, mode, cwd=cwd, expand=expand)

    if shape is FileSpecShape.GENERIC:
        primaries = [
            group.src[0]
            for group in normalize_multi_task_files(config, target_name, cwd)
            if group.src
        ]
        matched = _filter(primaries)
        new_config = copy.deepcopy(config) if isinstance(config, dict) else {}
        new_config["files"] = {"src": matched}
        return new_config, matched

    new_config = copy.deepcopy(config)
    if shape is FileSpecShape.SRC_LIST:
        src = new_config["src"]
        matched = _filter([src] if isinstance(src, str) else src)
        new_config["src"] = matched
    elif shape is FileSpecShape.STRING_FILES:
        matched = _filter(split_globs(new_config["files"]))
        new_config["files"] = ",".join(matched)
    elif shape is FileSpecShape.LIST_FILES:
        matched = _filter(new_config["files"])
        new_config["files"] = matched
    else:
        matched = _filter(new_config["files"]["src"])
        new_config["files"]["src"] = matched
    return new_config, matched
