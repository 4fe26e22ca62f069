"""Text rendering of decoded log records, driven by a ``%``-flag pattern.

Pattern flags:

* ``%l`` level letter
* ``%D`` local date and time of the timestamp
* ``%S`` timestamp in seconds
* ``%M`` timestamp in milliseconds
* ``%p`` process id
* ``%t`` thread id
* ``%#`` line
* ``%F`` file name
* ``%f`` function name
* ``%v`` message text

Any other ``%x`` is kept as is, for example ``[%l][%D:%S][%p:%t][%F:%f:%#]%v``.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from .effective_formatter import EffectiveMsg

_LEVEL_LETTERS = ("V", "D", "I", "W", "E", "F")
# The default header is built in a 1024-byte buffer, terminator included.
_HEADER_LIMIT = 1023

_Piece = Callable[[EffectiveMsg], str]


def level_str(level: int) -> str:
    """One-letter name of a level number, ``"U"`` when unknown."""
    if 0 <= level < len(_LEVEL_LETTERS):
        return _LEVEL_LETTERS[level]
    return "U"


def combine_log_msg(msg: EffectiveMsg) -> str:
    """Default rendering: ``[level][ms][pid:tid][file:func:line]message``."""
    header = (
        f"[{msg.level}][{msg.timestamp}][{msg.pid}:{msg.tid}]"
        f"[{msg.file_name}:{msg.func_name}:{msg.line}]"
    )
    raw = header.encode("utf-8")
    if len(raw) > _HEADER_LIMIT:
        header = raw[:_HEADER_LIMIT].decode("utf-8", errors="ignore")
    return header + msg.log_info


def milliseconds_to_date_string(milliseconds: int) -> str:
    """Local ``YYYY-MM-DD HH:MM:SS`` for a timestamp in milliseconds since the epoch."""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(milliseconds // 1000))


def _seconds(milliseconds: int) -> int:
    """Milliseconds to whole seconds, truncating toward zero."""
    seconds = abs(milliseconds) // 1000
    return seconds if milliseconds >= 0 else -seconds


def _literal(text: str) -> _Piece:
    return lambda _msg: text


_FLAGS: dict[str, _Piece] = {
    "l": lambda m: level_str(m.level),
    "D": lambda m: milliseconds_to_date_string(m.timestamp),
    "S": lambda m: str(_seconds(m.timestamp)),
    "M": lambda m: str(m.timestamp),
    "p": lambda m: str(m.pid),
    "t": lambda m: str(m.tid),
    "#": lambda m: str(m.line),
    "F": lambda m: m.file_name,
    "f": lambda m: m.func_name,
    "v": lambda m: m.log_info,
}


class DecodeFormatter:
    """Renders :class:`EffectiveMsg` records as lines of text."""

    def __init__(self, pattern: str | None = None) -> None:
        self._pieces: list[_Piece] = []
        if pattern is not None:
            self.set_pattern(pattern)

    def set_pattern(self, pattern: str) -> None:
        """Use ``pattern``; an empty pattern falls back to the default rendering."""
        pieces: list[_Piece] = []
        literal: list[str] = []
        chars = iter(pattern)
        for ch in chars:
            if ch != "%":
                literal.append(ch)
                continue
            if literal:
                pieces.append(_literal("".join(literal)))
                literal = []
            flag = next(chars, None)
            if flag is None:
                break
            pieces.append(_FLAGS.get(flag) or _literal("%" + flag))
        if literal:
            pieces.append(_literal("".join(literal)))
        self._pieces = pieces

    def format(self, msg: EffectiveMsg) -> str:
        """Render ``msg`` followed by a newline."""
        if self._pieces:
            body = "".join(piece(msg) for piece in self._pieces)
        else:
            body = combine_log_msg(msg)
        return body + "\n"