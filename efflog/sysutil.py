"""Process, thread, time and file helpers."""

from __future__ import annotations

import mmap
import os
import threading
import time


def page_size() -> int:
    """Size in bytes of a virtual memory page."""
    return mmap.PAGESIZE


def process_id() -> int:
    """Identifier of the current process."""
    return os.getpid()


def thread_id() -> int:
    """Native identifier of the calling thread."""
    return threading.get_native_id()


def local_time(timestamp: float | None = None) -> time.struct_time:
    """Broken-down local time for ``timestamp`` (seconds since the epoch), or now."""
    return time.localtime(timestamp)


def file_size(path: str | os.PathLike[str]) -> int:
    """Size in bytes of a regular file, or 0 if ``path`` is not one."""
    if os.path.isfile(path):
        return os.path.getsize(path)
    return 0