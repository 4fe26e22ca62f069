"""Formatters turn a log message into the bytes or text a sink writes."""

from __future__ import annotations

import abc
import time

from .common import LogMsg
from .sysutil import local_time, process_id, thread_id

_LEVEL_CHARS = "TDIWEF"


class Formatter(abc.ABC):
    """Base class for message formatters."""

    @abc.abstractmethod
    def format(self, msg: LogMsg):
        """Render ``msg``."""


class DefaultFormatter(Formatter):
    """Plain text: ``[date time] [L] [file:line] [pid:tid] message``."""

    def format(self, msg: LogMsg) -> str:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", local_time())
        level = int(msg.level)
        level_char = _LEVEL_CHARS[level] if 0 <= level < len(_LEVEL_CHARS) else ""
        loc = msg.location
        return (
            f"[{stamp}] [{level_char}] [{loc.file_name}:{loc.line}] "
            f"[{process_id()}:{thread_id()}] {msg.message}"
        )