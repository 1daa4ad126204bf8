from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Iterable

from git_newer.config import ConfigStore

logger = logging.getLogger(__name__)


class TaskError(RuntimeError):
    pass


class FatalError(TaskError):
    pass


class UnknownTaskError(TaskError):
    pass


TaskFn = Callable[..., None]


@dataclass
class RegisteredTask:
    name: str
    fn: TaskFn
    description: str = ""
    always_run: bool = False


@dataclass
class TaskContext:
    """What a task body sees: its own name, the runner and the live config."""

    name: str
    args: list[str]
    runner: "TaskRunner"
    config: ConfigStore
    _scheduled: list[str] = field(default_factory=list)

    def run(self, specs: str | Iterable[str]) -> None:
        self._scheduled.extend([specs] if isinstance(specs, str) else specs)


def parse_spec(spec: str) -> tuple[str, list[str]]:
    name, *args = spec.split(":")
    return name, args


class TaskRunner:
    """Serial task queue.

    Tasks scheduled from inside a running task are queued right after it, ahead
    of anything queued earlier. When a task fails, the rest of the queue is
    drained and only tasks registered with ``always_run`` still execute; the
    first failure is re-raised afterwards.
    """

    def __init__(self, config: ConfigStore | None = None):
        self.config = config if config is not None else ConfigStore()
        self.tasks: dict[str, RegisteredTask] = {}
        self.history: list[str] = []
        self._queue: deque[str] = deque()

    def register(
        self,
        name: str,
        fn: TaskFn,
        description: str = "",
        always_run: bool = False,
    ) -> None:
        self.tasks[name] = RegisteredTask(name=name, fn=fn, description=description, always_run=always_run)

    def run(self, specs: str | Iterable[str]) -> None:
        self._queue.extend([specs] if isinstance(specs, str) else specs)
        self._drain()

    def _execute(self, spec: str) -> list[str]:
        name, args = parse_spec(spec)
        task = self.tasks.get(name)
        if task is None:
            raise UnknownTaskError(f'Task "{name}" not found')

        ctx = TaskContext(name=name, args=args, runner=self, config=self.config)
        logger.info('Running "%s"', spec)
        self.history.append(spec)
        task.fn(ctx, *args)
        return ctx._scheduled

    def _drain(self) -> None:
        failure: BaseException | None = None
        while self._queue:
            spec = self._queue.popleft()
            if failure is not None:
                task = self.tasks.get(parse_spec(spec)[0])
                if task is None or not task.always_run:
                    logger.debug('Skipping "%s" after failure', spec)
                    continue
            try:
                scheduled = self._execute(spec)
            except Exception as exc:
                if failure is None:
                    failure = exc
                else:
                    logger.error('Task "%s" failed during cleanup: %s', spec, exc)
                continue
            self._queue.extendleft(reversed(scheduled))

        if failure is not None:
            raise failure

