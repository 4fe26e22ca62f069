"""Core log types: levels, source locations and log messages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class LogLevel(enum.IntEnum):
    """Severity of a log message, ordered from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    CRITICAL = 5
    OFF = 6


@dataclass(frozen=True)
class SourceLocation:
    """Where a log call was made. Only the base name of the file is kept."""

    file_name: str = ""
    line: int = 0
    fun_name: str = ""

    def __post_init__(self) -> None:
        name = self.file_name
        if not name:
            return
        pos = name.rfind("/")
        if pos == -1:
            pos = name.rfind("\\")
        if pos != -1:
            object.__setattr__(self, "file_name", name[pos + 1 :])


@dataclass(frozen=True)
class LogMsg:
    """A single log record handed from a handle to its sinks."""

    level: LogLevel
    message: str
    location: SourceLocation = field(default_factory=SourceLocation)