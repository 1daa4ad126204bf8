from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class MatchMode(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"


class FileSpecShape(str, Enum):
    SRC_LIST = "src-list"
    STRING_FILES = "string-files"
    LIST_FILES = "list-files"
    OBJECT_SRC_FILES = "object-src-files"
    GENERIC = "generic"


@dataclass(frozen=True)
class ChangeSet:
    root: str
    paths: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class FileGroup:
    src: list[str] = field(default_factory=list)
    dest: str | None = None


@dataclass
class GitNewerOptions:
    diff_filter: str = "ACM"
    branch: str = "HEAD"
