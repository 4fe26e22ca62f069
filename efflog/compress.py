"""Streaming compressors used to shrink log records before encryption."""

from __future__ import annotations

import abc
import zlib

import zstandard

_ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
_ZSTD_BLOCK_SIZE_MAX = 128 * 1024


def _is_zlib_compressed(data: bytes) -> bool:
    """Whether ``data`` starts with a valid zlib header (RFC 1950)."""
    if len(data) < 2:
        return False
    cmf, flg = data[0], data[1]
    return (cmf & 0x0F) == 8 and ((cmf << 8) | flg) % 31 == 0


def _is_zstd_compressed(data: bytes) -> bool:
    """Whether ``data`` starts with the zstd frame magic number."""
    return len(data) >= 4 and data[:4] == _ZSTD_MAGIC


class Compression(abc.ABC):
    """A compressor whose output is one continuous stream, flushed per call.

    Each ``compress`` call yields bytes that can be decompressed as soon as
    they are received; the first call after ``reset_stream`` starts a new
    stream with its own header.
    """

    @abc.abstractmethod
    def compress(self, data: bytes) -> bytes:
        """Compress ``data`` and flush it into the returned bytes."""

    @abc.abstractmethod
    def compress_bound(self, input_size: int) -> int:
        """Worst-case size of the output for ``input_size`` input bytes."""

    @abc.abstractmethod
    def decompress(self, data: bytes) -> bytes:
        """Decompress ``data``; returns ``b""`` if it cannot be decompressed."""

    @abc.abstractmethod
    def reset_stream(self) -> None:
        """Start a new compression stream."""


class ZlibCompress(Compression):
    """zlib stream at best compression, flushed with ``Z_SYNC_FLUSH``."""

    def __init__(self) -> None:
        self.reset_stream()
        self._reset_decompress_stream()

    def compress(self, data: bytes) -> bytes:
        data = bytes(data)
        return self._compressor.compress(data) + self._compressor.flush(zlib.Z_SYNC_FLUSH)

    def compress_bound(self, input_size: int) -> int:
        return input_size + 10

    def decompress(self, data: bytes) -> bytes:
        data = bytes(data)
        if not data:
            return b""
        if _is_zlib_compressed(data):
            self._reset_decompress_stream()
        try:
            return self._decompressor.decompress(data)
        except zlib.error:
            return b""

    def reset_stream(self) -> None:
        self._compressor = zlib.compressobj(
            zlib.Z_BEST_COMPRESSION,
            zlib.DEFLATED,
            zlib.MAX_WBITS,
            9,
            zlib.Z_DEFAULT_STRATEGY,
        )

    def _reset_decompress_stream(self) -> None:
        self._decompressor = zlib.decompressobj(zlib.MAX_WBITS)


class ZstdCompress(Compression):
    """zstd stream at level 5, each call flushed as a complete block."""

    def __init__(self) -> None:
        self._cctx = zstandard.ZstdCompressor(level=5)
        self._dctx = zstandard.ZstdDecompressor()
        self.reset_stream()
        self._reset_decompress_stream()

    def compress(self, data: bytes) -> bytes:
        data = bytes(data)
        if not data:
            return b""
        try:
            return self._cobj.compress(data) + self._cobj.flush(zstandard.COMPRESSOBJ_FLUSH_BLOCK)
        except zstandard.ZstdError:
            return b""

    def compress_bound(self, input_size: int) -> int:
        margin = (_ZSTD_BLOCK_SIZE_MAX - input_size) >> 11 if input_size < _ZSTD_BLOCK_SIZE_MAX else 0
        return input_size + (input_size >> 8) + margin

    def decompress(self, data: bytes) -> bytes:
        data = bytes(data)
        if not data:
            return b""
        if _is_zstd_compressed(data):
            self._reset_decompress_stream()
        try:
            return self._dobj.decompress(data)
        except zstandard.ZstdError:
            return b""

    def reset_stream(self) -> None:
        self._cobj = self._cctx.compressobj()

    def _reset_decompress_stream(self) -> None:
        self._dobj = self._dctx.decompressobj()