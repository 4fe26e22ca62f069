"""Reading encrypted log files back into text."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .compress import ZstdCompress
from .crypt import AESCrypt, compute_ecdh_shared_secret, hex_key_to_binary
from .decode_formatter import DecodeFormatter
from .effective_formatter import EffectiveMsg
from .effective_sink import ChunkHeader, ItemHeader

DEFAULT_PATTERN = "[%l][%D:%S][%p:%t][%F:%f:%#]%v"
_PUBLIC_KEY_SIZE = 65


class DecodeError(RuntimeError):
    """The log file is not in the expected format."""


def decode_chunk(
    data: bytes,
    client_pub_key: bytes,
    server_pri_key: str,
    formatter: DecodeFormatter | None = None,
) -> str:
    """Decrypt, decompress and render every record of one chunk body.

    ``server_pri_key`` is the reader's private key in hex; each record is
    followed by an empty line.
    """
    data = bytes(data)
    formatter = formatter if formatter is not None else DecodeFormatter()
    shared_secret = compute_ecdh_shared_secret(hex_key_to_binary(server_pri_key), client_pub_key)
    crypt = AESCrypt(shared_secret)
    decompressor = ZstdCompress()

    parts: list[str] = []
    offset = 0
    while offset < len(data):
        if len(data) - offset < ItemHeader.SIZE:
            raise DecodeError("truncated item header")
        header = ItemHeader.unpack(data[offset : offset + ItemHeader.SIZE])
        if header.magic != ItemHeader.MAGIC:
            raise DecodeError("invalid item magic")
        offset += ItemHeader.SIZE
        end = offset + header.size
        if end > len(data):
            raise DecodeError("truncated item")
        raw = decompressor.decompress(crypt.decrypt(data[offset:end]))
        try:
            record = EffectiveMsg.from_bytes(raw)
        except ValueError as exc:
            raise DecodeError(f"invalid record: {exc}") from exc
        parts.append(formatter.format(record))
        parts.append("\n")
        offset = end
    return "".join(parts)


def decode_file(
    input_path: str | os.PathLike[str],
    pri_key: str,
    output_path: str | os.PathLike[str],
    pattern: str | None = DEFAULT_PATTERN,
) -> int:
    """Decode every chunk of ``input_path`` and append the text to ``output_path``.

    ``pattern`` of ``None`` selects the default rendering. Returns the
    number of chunks decoded.
    """
    data = Path(input_path).read_bytes()
    if len(data) < ChunkHeader.SIZE:
        raise DecodeError("input file is too small")
    if ChunkHeader.unpack(data).magic != ChunkHeader.MAGIC:
        raise DecodeError("invalid file magic")

    formatter = DecodeFormatter(pattern)
    chunks = 0
    offset = 0
    while offset < len(data):
        if len(data) - offset < ChunkHeader.SIZE:
            raise DecodeError("truncated chunk header")
        header = ChunkHeader.unpack(data[offset : offset + ChunkHeader.SIZE])
        if header.magic != ChunkHeader.MAGIC:
            raise DecodeError("invalid chunk magic")
        offset += ChunkHeader.SIZE
        end = offset + header.size
        if end > len(data):
            raise DecodeError("truncated chunk")
        text = decode_chunk(
            data[offset:end], header.pub_key[:_PUBLIC_KEY_SIZE], pri_key, formatter
        )
        with open(output_path, "a", encoding="utf-8", newline="") as out:
            out.write(text)
        chunks += 1
        offset = end
    return chunks


def main(argv: list[str] | None = None) -> int:
    """Command line entry: ``decode <file_path> <pri_key> <output_file>``."""
    parser = argparse.ArgumentParser(prog="efflog-decode", description="Decode an encrypted log file.")
    parser.add_argument("file_path", help="encrypted log file")
    parser.add_argument("pri_key", help="reader's private key in hex")
    parser.add_argument("output_file", help="text file to append to")
    parser.add_argument("--pattern", default=DEFAULT_PATTERN, help="record pattern")
    args = parser.parse_args(argv)
    try:
        decode_file(args.file_path, args.pri_key, args.output_file, args.pattern)
    except (RuntimeError, OSError, ValueError) as exc:
        print(f"Decode failed: {exc}", file=sys.stderr)
        return 1
    return 0