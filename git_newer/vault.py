from __future__ import annotations

import copy
import itertools
import logging
from typing import Any

logger = logging.getLogger(__name__)


class SnapshotNotFoundError(KeyError):
    def __init__(self, handle: object):
        super().__init__(handle)
        self.handle = handle

    def __str__(self) -> str:
        return f"no snapshot for this handle: {self.handle!r}"


class ConfigVault:
    """Holds target config snapshots until the matching restore step takes them.

    Snapshots are keyed by an integer handle rather than by target name, so two
    in-flight runs of the same target never collide. Handles come from a
    monotonic counter and are never handed out twice.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._snapshots: dict[int, Any] = {}

    def store(self, config: Any) -> int:
        handle = next(self._counter)
        self._snapshots[handle] = copy.deepcopy(config)
        logger.debug("Stored config snapshot %d", handle)
        return handle

    def take(self, handle: int | str) -> Any:
        key = _coerce_handle(handle)
        if key is None or key not in self._snapshots:
            raise SnapshotNotFoundError(handle)
        logger.debug("Took config snapshot %d", key)
        return self._snapshots.pop(key)

    def __contains__(self, handle: object) -> bool:
        return _coerce_handle(handle) in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)


def _coerce_handle(handle: object) -> int | None:
    # Handles travel through task specs as strings.
    if isinstance(handle, bool):
        return None
    if isinstance(handle, int):
        return handle
    if isinstance(handle, str) and handle.isascii() and handle.isdigit():
        return int(handle)
    return None
