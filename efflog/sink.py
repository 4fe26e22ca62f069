"""Sinks receive log messages and write them somewhere."""

from __future__ import annotations

import abc
import sys
import threading
from typing import TextIO

from .common import LogMsg
from .formatter import DefaultFormatter, Formatter


class Sink(abc.ABC):
    """Destination for log messages."""

    @abc.abstractmethod
    def log(self, msg: LogMsg) -> None:
        """Write one message."""

    @abc.abstractmethod
    def set_formatter(self, formatter: Formatter) -> None:
        """Replace the formatter used by this sink."""

    def flush(self) -> None:
        """Push buffered output to its destination; nothing by default."""


class ConsoleSink(Sink):
    """Writes formatted messages, one per line, to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._formatter: Formatter = DefaultFormatter()
        self._lock = threading.Lock()

    def log(self, msg: LogMsg) -> None:
        data = self._formatter.format(msg)
        stream = self._stream if self._stream is not None else sys.stdout
        with self._lock:
            stream.write(data)
            stream.write("\n")

    def set_formatter(self, formatter: Formatter) -> None:
        self._formatter = formatter