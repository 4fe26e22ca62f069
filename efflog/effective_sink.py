"""A sink that compresses, encrypts and caches records before writing them to files."""

from __future__ import annotations

import struct
import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import ClassVar

from .common import LogMsg
from .compress import Compression, ZstdCompress
from .context import Context, post_repeated_task, post_task, wait_task_idle
from .crypt import AESCrypt, Crypt, compute_ecdh_shared_secret, generate_ecdh_key_pair, hex_key_to_binary
from .effective_formatter import EffectiveFormatter
from .formatter import Formatter
from .mmap_cache import MMapHandle
from .sink import Sink
from .space import Space, Unit
from .sysutil import file_size, local_time

_CHUNK = struct.Struct("<QQ128s")
_ITEM = struct.Struct("<II")
_SWAP_RATIO = 0.8


@dataclass(frozen=True)
class ChunkHeader:
    """Header before each chunk of items in a log file.

    ``pub_key`` holds the writer's ECDH public key, so a reader with the
    matching private key can derive the chunk's AES key.
    """

    MAGIC: ClassVar[int] = 0xDEADBEEFDADA1100
    SIZE: ClassVar[int] = _CHUNK.size

    size: int = 0
    pub_key: bytes = b""
    magic: int = MAGIC

    def pack(self) -> bytes:
        """Binary form; the key field is zero-padded to 128 bytes."""
        if len(self.pub_key) > 128:
            raise ValueError("public key longer than 128 bytes")
        return _CHUNK.pack(self.magic, self.size, bytes(self.pub_key))

    @classmethod
    def unpack(cls, data: bytes) -> ChunkHeader:
        """Read a header from the start of ``data``; the magic is not checked."""
        if len(data) < cls.SIZE:
            raise ValueError("chunk header truncated")
        magic, size, pub_key = _CHUNK.unpack_from(data, 0)
        return cls(size=size, pub_key=pub_key, magic=magic)


@dataclass(frozen=True)
class ItemHeader:
    """Header before each encrypted record inside a chunk."""

    MAGIC: ClassVar[int] = 0xBE5FBA11
    SIZE: ClassVar[int] = _ITEM.size

    size: int = 0
    magic: int = MAGIC

    def pack(self) -> bytes:
        """Binary form of the header."""
        return _ITEM.pack(self.magic, self.size)

    @classmethod
    def unpack(cls, data: bytes) -> ItemHeader:
        """Read a header from the start of ``data``; the magic is not checked."""
        if len(data) < cls.SIZE:
            raise ValueError("item header truncated")
        magic, size = _ITEM.unpack_from(data, 0)
        return cls(size=size, magic=magic)


@dataclass
class EffectiveSinkConfig:
    """Settings of an :class:`EffectiveSink`.

    Files are named ``{prefix}_{date time}.log``; ``pub_key`` is the reader's
    ECDH public key in hex.
    """

    dir: Path
    prefix: str
    pub_key: str
    interval: timedelta = timedelta(minutes=5)
    single_size: Space = field(default=Space(4, Unit.MEGA))
    total_size: Space = field(default=Space(100, Unit.MEGA))

    def __post_init__(self) -> None:
        self.dir = Path(self.dir)


class EffectiveSink(Sink):
    """Writes compressed, encrypted records through two memory-mapped caches.

    Records go to a master cache; when it fills up it is swapped with a
    slave cache, which a background runner appends to the current log file.
    Cached data left over from an earlier run is written out on start.
    Old log files are removed periodically once their total size exceeds
    the configured limit.
    """

    def __init__(self, conf: EffectiveSinkConfig) -> None:
        self._conf = conf
        self._dir = Path(conf.dir)
        self._dir.mkdir(parents=True, exist_ok=True)

        client_pri, self._client_pub_key = generate_ecdh_key_pair()
        shared_secret = compute_ecdh_shared_secret(client_pri, hex_key_to_binary(conf.pub_key))
        self._crypt: Crypt = AESCrypt(shared_secret)
        self._compress: Compression = ZstdCompress()
        self._formatter = EffectiveFormatter()

        self._lock = threading.Lock()
        self._slave_is_free = True
        self._log_file: Path | None = None
        self._closed = False

        self._task_runner = Context.instance().create_new_task_runner()
        self._master = MMapHandle(self._dir / "master_cache")
        self._slave = MMapHandle(self._dir / "slave_cache")

        if not self._slave.empty:
            self._slave_is_free = False
            self._prepare_cache_to_file()
            wait_task_idle(self._task_runner)

        if not self._master.empty:
            self._swap_if_slave_empty()
            self._prepare_cache_to_file()

        self._removal_id = post_repeated_task(
            self._task_runner, self._remove_old_files, conf.interval, -1
        )

    def log(self, msg: LogMsg) -> None:
        data = self._formatter.format(msg)
        with self._lock:
            if self._master.empty:
                self._compress.reset_stream()
            compressed = self._compress.compress(data)
            encrypted = self._crypt.encrypt(compressed)
            if not encrypted:
                return
            self._master.push(ItemHeader(size=len(encrypted)).pack())
            self._master.push(encrypted)
            need_swap = self._master.ratio > _SWAP_RATIO

        if need_swap:
            self._swap_if_slave_empty()
            self._prepare_cache_to_file()

    def set_formatter(self, formatter: Formatter) -> None:
        """Ignored: this sink always writes its own binary record format."""

    def flush(self) -> None:
        """Write everything cached so far to the log file and wait for it."""
        self._prepare_cache_to_file()
        wait_task_idle(self._task_runner)
        with self._lock:
            if self._slave_is_free:
                self._slave_is_free = False
                self._master, self._slave = self._slave, self._master
        self._prepare_cache_to_file()
        wait_task_idle(self._task_runner)

    def close(self) -> None:
        """Stop old-file removal and release the caches.

        Records not yet flushed stay in the cache files and are written out
        by the next sink opened on the same directory.
        """
        if self._closed:
            return
        self._closed = True
        Context.instance().executor.cancel_repeated_task(self._removal_id)
        wait_task_idle(self._task_runner)
        with self._lock:
            for cache in (self._master, self._slave):
                cache.sync()
                cache.close()

    def __enter__(self) -> EffectiveSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _swap_if_slave_empty(self) -> None:
        with self._lock:
            if self._slave.empty:
                self._slave_is_free = False
                self._master, self._slave = self._slave, self._master

    def _prepare_cache_to_file(self) -> None:
        post_task(self._task_runner, self._cache_to_file)

    def _cache_to_file(self) -> None:
        with self._lock:
            if self._slave_is_free:
                return
            if self._slave.empty:
                self._slave_is_free = True
                return
            slave = self._slave

        path = self._log_file_path()
        payload = slave.data
        header = ChunkHeader(size=len(payload), pub_key=self._client_pub_key)
        with open(path, "ab") as out:
            out.write(header.pack())
            out.write(payload)

        with self._lock:
            slave.clear()
            self._slave_is_free = True

    def _remove_old_files(self) -> None:
        files = [p for p in self._dir.iterdir() if p.suffix == ".log" and p.is_file()]
        files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        total_bytes = self._conf.total_size.to(Unit.BYTES).count
        used_bytes = 0
        for path in files:
            used_bytes += file_size(path)
            if used_bytes > total_bytes:
                path.unlink(missing_ok=True)

    def _log_file_path(self) -> Path:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", local_time())
        base = f"{self._conf.prefix}_{stamp}"
        if self._log_file is None:
            self._log_file = self._dir / f"{base}.log"
        elif file_size(self._log_file) > self._conf.single_size.to(Unit.BYTES).count:
            candidate = self._dir / f"{base}.log"
            if candidate.exists():
                # Names only resolve to the second; number further files.
                index = sum(1 for p in self._dir.iterdir() if base in p.name)
                self._log_file = self._dir / f"{base}_{index}.log"
            else:
                self._log_file = candidate
        return self._log_file