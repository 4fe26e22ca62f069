"""Task runners plus a timer for delayed and repeated tasks."""

from __future__ import annotations

import functools
import heapq
import itertools
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from datetime import timedelta
from typing import Any

from .thread_pool import ThreadPool

Task = Callable[[], Any]


def _to_seconds(duration: float | timedelta) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


class _ExecutorTimer:
    """Fires scheduled callables at their due time on its own thread."""

    def __init__(self) -> None:
        self._pool = ThreadPool(1)
        self._queue: list[tuple[float, int, Task]] = []
        self._cond = threading.Condition()
        self._running = False
        self._start_lock = threading.Lock()
        self._ids = itertools.count()
        self._repeated_ids: set[int] = set()
        self._ids_lock = threading.Lock()

    def start(self) -> bool:
        with self._start_lock:
            if self._running:
                return False
            self._running = True
            started = self._pool.start()
            self._pool.submit(self._run)
            return started

    def stop(self) -> None:
        with self._start_lock:
            if not self._running:
                return
            with self._cond:
                self._running = False
                self._cond.notify_all()
            self._pool.stop()

    def _run(self) -> None:
        while True:
            with self._cond:
                while self._running and not self._queue:
                    self._cond.wait()
                if not self._running:
                    return
                due, _, task = self._queue[0]
                remaining = due - time.monotonic()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                heapq.heappop(self._queue)
            try:
                task()
            except Exception:
                # A failing scheduled task must not stop the timer.
                pass

    def _schedule(self, task: Task, delay: float) -> None:
        entry = (time.monotonic() + delay, next(self._ids), task)
        with self._cond:
            heapq.heappush(self._queue, entry)
            self._cond.notify_all()

    def post_delayed_task(self, task: Task, delay: float) -> None:
        self._schedule(task, delay)

    def post_repeated_task(self, task: Task, interval: float, repeat_num: int) -> int:
        task_id = next(self._ids)
        with self._ids_lock:
            self._repeated_ids.add(task_id)
        self._repeat(task, interval, task_id, repeat_num)
        return task_id

    def _repeat(self, task: Task, interval: float, task_id: int, remaining: int) -> None:
        with self._ids_lock:
            if task_id not in self._repeated_ids or remaining == 0:
                return
        task()
        self._schedule(functools.partial(self._repeat, task, interval, task_id, remaining - 1), interval)

    def cancel_repeated_task(self, task_id: int) -> None:
        with self._ids_lock:
            self._repeated_ids.discard(task_id)


class Executor:
    """Owns serial task runners, identified by tags, and a timer that feeds them.

    Every runner is a single worker thread, so tasks posted to one runner run
    in the order they were posted.
    """

    def __init__(self) -> None:
        self._runners: dict[int, ThreadPool] = {}
        self._runners_lock = threading.Lock()
        self._tags = itertools.count()
        self._timer = _ExecutorTimer()

    def add_task_runner(self) -> int:
        """Create and start a new runner and return its tag."""
        with self._runners_lock:
            tag = next(self._tags)
            while tag in self._runners:
                tag = next(self._tags)
            runner = ThreadPool(1)
            runner.start()
            self._runners[tag] = runner
        return tag

    def _runner(self, runner_tag: int) -> ThreadPool:
        with self._runners_lock:
            runner = self._runners.get(runner_tag)
        if runner is None:
            raise LookupError(f"TaskRunner not found for tag: {runner_tag}")
        return runner

    def post_task(self, runner_tag: int, task: Task) -> None:
        """Run ``task`` on the runner ``runner_tag``."""
        self._runner(runner_tag).submit(task)

    def post_task_and_get_result(self, runner_tag: int, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Run ``fn(*args, **kwargs)`` on a runner and return a future for its result."""
        return self._runner(runner_tag).submit_with_future(fn, *args, **kwargs)

    def post_delayed_task(self, runner_tag: int, task: Task, delay: float | timedelta) -> None:
        """Run ``task`` on a runner once ``delay`` (seconds or timedelta) has passed."""
        self._timer.start()
        self._timer.post_delayed_task(functools.partial(self.post_task, runner_tag, task), _to_seconds(delay))

    def post_repeated_task(
        self, runner_tag: int, task: Task, interval: float | timedelta, repeat_num: int
    ) -> int:
        """Run ``task`` now and then every ``interval``, ``repeat_num`` times in all.

        A negative ``repeat_num`` repeats until cancelled. Returns an id for
        :meth:`cancel_repeated_task`.
        """
        self._timer.start()
        return self._timer.post_repeated_task(
            functools.partial(self.post_task, runner_tag, task), _to_seconds(interval), repeat_num
        )

    def cancel_repeated_task(self, task_id: int) -> None:
        """Stop further runs of a repeated task."""
        self._timer.cancel_repeated_task(task_id)

    def shutdown(self) -> None:
        """Stop the timer and every runner."""
        self._timer.stop()
        with self._runners_lock:
            runners = list(self._runners.values())
            self._runners.clear()
        for runner in runners:
            runner.stop()

    def __enter__(self) -> Executor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()