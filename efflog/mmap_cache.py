"""A growable byte buffer backed by a memory-mapped file."""

from __future__ import annotations

import mmap
import os
import struct
from pathlib import Path

from .sysutil import file_size, page_size

# magic (uint32), padding, payload size (uint64)
_HEADER = struct.Struct("<I4xQ")
_MAGIC = 0xDEADBEEF
_DEFAULT_CAPACITY = 512 * 1024


class MMapHandle:
    """Append-only byte buffer persisted in a memory-mapped file.

    The file starts with a header holding a magic number and the payload
    size, so content written by one process is found again when the same
    file is opened later.
    """

    HEADER_SIZE = _HEADER.size

    def __init__(self, file_path: str | os.PathLike[str]) -> None:
        self._path = Path(file_path)
        self._mm: mmap.mmap | None = None
        self._capacity = 0
        self._reserve(max(file_size(self._path), _DEFAULT_CAPACITY))
        self._init_header()

    @property
    def path(self) -> Path:
        """The backing file."""
        return self._path

    @property
    def capacity(self) -> int:
        """Size in bytes of the mapping, header included."""
        return self._capacity

    @property
    def size(self) -> int:
        """Number of payload bytes held."""
        if not self._valid():
            return 0
        return _HEADER.unpack_from(self._mm, 0)[1]

    @property
    def empty(self) -> bool:
        """Whether no payload is held."""
        return self.size == 0

    @property
    def data(self) -> bytes:
        """A copy of the payload bytes."""
        if not self._valid():
            return b""
        start = self.HEADER_SIZE
        return self._mm[start : start + self.size]

    @property
    def ratio(self) -> float:
        """Fraction of the payload area currently in use."""
        if not self._valid():
            return 0.0
        cap = self._capacity - self.HEADER_SIZE
        return self.size / cap if cap > 0 else 0.0

    def resize(self, new_size: int) -> None:
        """Set the payload size, growing the mapping when needed."""
        self._require_valid()
        if new_size < 0:
            raise ValueError("size must not be negative")
        need = self.HEADER_SIZE + new_size
        if need >= self._capacity:
            self._reserve(need)
        self._set_size(new_size)

    def push(self, data: bytes) -> None:
        """Append ``data`` to the payload, growing the mapping when needed."""
        self._require_valid()
        data = bytes(data)
        size = self.size
        self._reserve(self.HEADER_SIZE + size + len(data))
        start = self.HEADER_SIZE + size
        self._mm[start : start + len(data)] = data
        self._set_size(size + len(data))

    def clear(self) -> None:
        """Drop the payload; the mapping is kept."""
        self._require_valid()
        self._set_size(0)

    def sync(self) -> None:
        """Write dirty pages back to the file."""
        if self._mm is not None:
            self._mm.flush()

    def close(self) -> None:
        """Sync and unmap the file; the handle cannot be used afterwards."""
        if self._mm is not None:
            self._mm.flush()
            self._mm.close()
            self._mm = None

    def __enter__(self) -> MMapHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _valid(self) -> bool:
        if self._mm is None or self._capacity < self.HEADER_SIZE:
            return False
        return _HEADER.unpack_from(self._mm, 0)[0] == _MAGIC

    def _require_valid(self) -> None:
        if not self._valid():
            raise ValueError("mmap cache is closed")

    def _set_size(self, size: int) -> None:
        _HEADER.pack_into(self._mm, 0, _MAGIC, size)

    def _init_header(self) -> None:
        if self._mm is None or self._capacity < self.HEADER_SIZE:
            return
        if _HEADER.unpack_from(self._mm, 0)[0] != _MAGIC:
            _HEADER.pack_into(self._mm, 0, _MAGIC, 0)

    @staticmethod
    def _valid_capacity(size: int) -> int:
        ps = page_size()
        return ((size + ps - 1) // ps) * ps

    def _reserve(self, target: int) -> None:
        target = self._valid_capacity(target)
        if target < self._capacity:
            return
        new_capacity = self._capacity + max(self._capacity, target)
        self._unmap()
        self._map(new_capacity)
        self._capacity = new_capacity

    def _map(self, capacity: int) -> None:
        flags = os.O_RDWR | os.O_CREAT | getattr(os, "O_BINARY", 0)
        fd = os.open(self._path, flags, 0o700)
        try:
            os.ftruncate(fd, capacity)
            self._mm = mmap.mmap(fd, capacity)
        finally:
            os.close(fd)

    def _unmap(self) -> None:
        if self._mm is not None:
            self._mm.close()
        self._mm = None