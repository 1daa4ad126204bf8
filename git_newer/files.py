from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Any, Iterable

from git_newer.models import FileGroup


def _flatten(patterns: Any) -> list[str]:
    if patterns is None:
        return []
    if isinstance(patterns, str):
        return [patterns]
    out: list[str] = []
    for p in patterns:
        out.extend(_flatten(p))
    return out


def split_globs(value: str) -> list[str]:
    """Split a comma-joined glob string into its patterns."""
    return [p.strip() for p in value.split(",") if p.strip()]


def _glob(pattern: str, cwd: Path | str | None) -> list[str]:
    return sorted(glob.glob(pattern, root_dir=cwd, recursive=True))


def expand_files(patterns: str | Iterable[Any] | None, cwd: Path | str | None = None) -> list[str]:
    """Expand glob patterns to the on-disk paths they match.

    Patterns are processed in order. A pattern starting with ``!`` removes its
    matches from what has been collected so far. Paths are returned relative to
    ``cwd`` (or as written, for absolute patterns) and without duplicates.
    """
    result: list[str] = []
    seen: set[str] = set()

    for pattern in _flatten(patterns):
        if not pattern:
            continue
        if pattern.startswith("!"):
            excluded = set(_glob(pattern[1:], cwd))
            result = [p for p in result if p not in excluded]
            seen -= excluded
            continue
        for match in _glob(pattern, cwd):
            if match not in seen:
                seen.add(match)
                result.append(match)
    return result


def _groups_from_mapping(mapping: dict[str, Any]) -> list[tuple[Any, str | None]]:
    return [(src, dest) for dest, src in mapping.items()]


def normalize_multi_task_files(
    config: Any,
    target_name: str,
    cwd: Path | str | None = None,
) -> list[FileGroup]:
    """Normalize any supported target file layout into a list of file groups.

    Understands ``{src, dest}`` targets, ``files`` given as a ``dest -> src``
    mapping or as a list of ``{src, dest}`` entries / mappings, and bare list or
    string targets (whose destination is the target name).
    """
    raw: list[tuple[Any, str | None]] = []

    if isinstance(config, (str, list)):
        raw.append((config, target_name))
    elif isinstance(config, dict):
        if "src" in config or "dest" in config:
            raw.append((config.get("src"), config.get("dest")))
        elif "files" in config:
            files = config["files"]
            if isinstance(files, dict):
                if "src" in files or "dest" in files:
                    raw.append((files.get("src"), files.get("dest")))
                else:
                    raw.extend(_groups_from_mapping(files))
            elif isinstance(files, list):
                for entry in files:
                    if isinstance(entry, dict) and ("src" in entry or "dest" in entry):
                        raw.append((entry.get("src"), entry.get("dest")))
                    elif isinstance(entry, dict):
                        raw.extend(_groups_from_mapping(entry))
                    else:
                        raw.append((entry, None))
            elif isinstance(files, str):
                raw.append((split_globs(files), None))

    return [FileGroup(src=expand_files(src, cwd), dest=dest) for src, dest in raw]


def target_file_list(config: Any, target_name: str, cwd: Path | str | None = None) -> list[str]:
    """All expanded source files of a target, in group order."""
    out: list[str] = []
    for group in normalize_multi_task_files(config, target_name, cwd):
        for src in group.src:
            if src not in out:
                out.append(src)
    return out
