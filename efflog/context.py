"""Process-wide executor and shortcuts for posting work to it."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from .executor import Executor


class Context:
    """Singleton owning the shared :class:`Executor`."""

    _instance: Context | None = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._executor = Executor()

    @classmethod
    def instance(cls) -> Context:
        """Return the single shared context, creating it on first use."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @property
    def executor(self) -> Executor:
        """The shared executor."""
        return self._executor

    def create_new_task_runner(self) -> int:
        """Create a new serial task runner on the shared executor."""
        return self._executor.add_task_runner()


def post_task(runner_tag: int, task: Callable[[], Any]) -> None:
    """Run ``task`` on a runner of the shared executor."""
    Context.instance().executor.post_task(runner_tag, task)


def wait_task_idle(runner_tag: int) -> None:
    """Block until every task posted so far to ``runner_tag`` has run."""
    Context.instance().executor.post_task_and_get_result(runner_tag, lambda: None).result()


def post_repeated_task(
    runner_tag: int, task: Callable[[], Any], interval: float | timedelta, repeat_num: int
) -> int:
    """Repeat ``task`` on a runner of the shared executor; returns its id."""
    return Context.instance().executor.post_repeated_task(runner_tag, task, interval, repeat_num)