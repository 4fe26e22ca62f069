"""A fixed-size pool of worker threads fed from a FIFO task queue."""

from __future__ import annotations

import collections
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any


class ThreadPool:
    """Runs submitted callables on ``pool_size`` worker threads.

    With a single worker, tasks run one at a time in submission order.
    Stopping the pool drops tasks that have not started yet; the pool can
    be started again afterwards.
    """

    def __init__(self, pool_size: int) -> None:
        self._pool_size = pool_size
        self._tasks: collections.deque[Callable[[], None]] = collections.deque()
        self._cond = threading.Condition()
        self._running = False
        self._generation = 0
        self._workers: list[threading.Thread] = []

    @property
    def size(self) -> int:
        """Number of worker threads the pool runs."""
        return self._pool_size

    @property
    def running(self) -> bool:
        """Whether the pool has been started and not stopped."""
        return self._running

    def start(self) -> bool:
        """Start the workers; returns ``False`` if the pool is already running."""
        with self._cond:
            if self._running:
                return False
            self._running = True
            self._generation += 1
            generation = self._generation
            self._workers = [
                threading.Thread(target=self._work, args=(generation,), daemon=True)
                for _ in range(self._pool_size)
            ]
            for worker in self._workers:
                worker.start()
        return True

    def stop(self) -> None:
        """Stop the workers and wait for the ones running a task to finish it."""
        with self._cond:
            if not self._running:
                return
            self._running = False
            self._cond.notify_all()
            workers, self._workers = self._workers, []
        current = threading.current_thread()
        for worker in workers:
            if worker is not current:
                worker.join()

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``fn(*args, **kwargs)`` without a way to collect its result."""

        def task() -> None:
            try:
                fn(*args, **kwargs)
            except Exception:
                # A failing fire-and-forget task must not take its worker down.
                pass

        self._enqueue(task)

    def submit_with_future(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue ``fn(*args, **kwargs)`` and return a future for its result."""
        future: Future = Future()

        def task() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        self._enqueue(task)
        return future

    def _enqueue(self, task: Callable[[], None]) -> None:
        with self._cond:
            if not self._running:
                raise RuntimeError("submit on stopped ThreadPool")
            self._tasks.append(task)
            self._cond.notify()

    def _work(self, generation: int) -> None:
        while True:
            with self._cond:
                while self._alive(generation) and not self._tasks:
                    self._cond.wait()
                if not self._alive(generation):
                    return
                task = self._tasks.popleft()
            task()

    def _alive(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def __enter__(self) -> ThreadPool:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()