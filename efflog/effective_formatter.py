"""Compact binary encoding of log messages in protobuf wire format."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass

from .common import LogMsg
from .formatter import Formatter
from .sysutil import process_id, thread_id

_MASK64 = (1 << 64) - 1
_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_LEN = 2
_WIRE_FIXED32 = 5

# field number, attribute name, value type
_FIELDS = (
    (1, "level", int),
    (2, "timestamp", int),
    (3, "pid", int),
    (4, "tid", int),
    (5, "line", int),
    (6, "file_name", str),
    (7, "func_name", str),
    (8, "log_info", str),
)
_BY_NUMBER = {number: (name, kind) for number, name, kind in _FIELDS}


def _encode_varint(value: int) -> bytes:
    value &= _MASK64
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _decode_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result & _MASK64, pos
        shift += 7
        if shift >= 70:
            raise ValueError("varint too long")


def _signed(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


@dataclass
class EffectiveMsg:
    """One log record as stored in an encrypted log file."""

    level: int = 0
    timestamp: int = 0
    pid: int = 0
    tid: int = 0
    line: int = 0
    file_name: str = ""
    func_name: str = ""
    log_info: str = ""

    def to_bytes(self) -> bytes:
        """Serialise; fields holding their default value are left out."""
        out = bytearray()
        for number, name, kind in _FIELDS:
            value = getattr(self, name)
            if not value:
                continue
            if kind is int:
                out += _encode_varint(number << 3 | _WIRE_VARINT)
                out += _encode_varint(value)
            else:
                raw = value.encode("utf-8")
                out += _encode_varint(number << 3 | _WIRE_LEN)
                out += _encode_varint(len(raw))
                out += raw
        return bytes(out)

    @classmethod
    def from_bytes(cls, data: bytes) -> EffectiveMsg:
        """Parse serialised bytes; unknown fields are skipped.

        Raises :class:`ValueError` on malformed input.
        """
        data = bytes(data)
        values: dict[str, int | str] = {}
        pos = 0
        while pos < len(data):
            key, pos = _decode_varint(data, pos)
            number, wire = key >> 3, key & 7
            field = _BY_NUMBER.get(number)
            if field is not None:
                expected = _WIRE_VARINT if field[1] is int else _WIRE_LEN
                if wire != expected:
                    raise ValueError(f"field {number} has wrong wire type {wire}")
            if wire == _WIRE_VARINT:
                value, pos = _decode_varint(data, pos)
                if field is not None:
                    values[field[0]] = _signed(value)
            elif wire == _WIRE_LEN:
                length, pos = _decode_varint(data, pos)
                end = pos + length
                if end > len(data):
                    raise ValueError("truncated length-delimited field")
                raw = data[pos:end]
                pos = end
                if field is not None:
                    values[field[0]] = raw.decode("utf-8")
            elif wire in (_WIRE_FIXED64, _WIRE_FIXED32):
                pos += 8 if wire == _WIRE_FIXED64 else 4
                if pos > len(data):
                    raise ValueError("truncated fixed-width field")
            else:
                raise ValueError(f"unsupported wire type {wire}")
        return cls(**values)


class EffectiveFormatter(Formatter):
    """Encodes a message, with time, process and thread, as :class:`EffectiveMsg` bytes."""

    def format(self, msg: LogMsg) -> bytes:
        loc = msg.location
        record = EffectiveMsg(
            level=int(msg.level),
            timestamp=time.time_ns() // 1_000_000,
            pid=process_id(),
            tid=thread_id(),
            line=loc.line,
            file_name=loc.file_name,
            func_name=loc.fun_name,
            log_info=msg.message,
        )
        return record.to_bytes()


__all__ = ["EffectiveMsg", "EffectiveFormatter"]

_ = os  # process helpers come from sysutil; os kept for platform-neutral imports