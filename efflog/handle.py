"""Log handles filter messages by level and fan them out to sinks."""

from __future__ import annotations

from collections.abc import Iterable

from .common import LogLevel, LogMsg, SourceLocation
from .sink import Sink


class LogHandle:
    """Dispatches messages at or above ``level`` to every sink it holds."""

    def __init__(self, sinks: Sink | Iterable[Sink | None] | None) -> None:
        if sinks is None:
            sinks = []
        elif isinstance(sinks, Sink):
            sinks = [sinks]
        self.sinks: list[Sink] = [sink for sink in sinks if sink is not None]
        self.level: LogLevel = LogLevel.INFO

    def should_log(self, level: LogLevel) -> bool:
        """Whether a message at ``level`` passes this handle's threshold."""
        return level >= self.level

    def log(self, level: LogLevel, loc: SourceLocation | None, message: str) -> None:
        """Send ``message`` to all sinks if ``level`` passes the threshold."""
        if not self.should_log(level):
            return
        self._dispatch(LogMsg(level, message, loc if loc is not None else SourceLocation()))

    def _dispatch(self, msg: LogMsg) -> None:
        for sink in self.sinks:
            sink.log(msg)


class ExtensionLogHandle(LogHandle):
    """A handle whose ``log`` builds the message with ``str.format``."""

    def log(self, level: LogLevel, loc: SourceLocation | None, fmt: str, *args, **kwargs) -> None:
        """Format ``fmt`` with the arguments and send it if ``level`` passes."""
        if not self.should_log(level):
            return
        message = fmt.format(*args, **kwargs)
        self._dispatch(LogMsg(level, message, loc if loc is not None else SourceLocation()))