# efflog

A logging library for applications whose logs have to be small, private and
survive a crash.

Each record is serialised into a compact binary message, compressed with
zstd and encrypted with AES. The AES key comes from an ECDH exchange between
a key pair made fresh for each sink and the public key of whoever will read
the logs. Encrypted records are first appended to a memory-mapped cache file,
so a process that dies suddenly loses nothing. The cache is written to
rotating `.log` files on a background task runner. Old files are removed once
the directory grows past its size limit.

A plain console sink with a human-readable format is also included. A
decoder turns encrypted log files back into text.

## Installation

```
pip install efflog
```

## Logging to the console

A handle filters records by level and passes them to its sinks.
`ExtensionLogHandle.log` builds the message with `str.format`:

```python
from efflog.common import LogLevel, SourceLocation
from efflog.handle import ExtensionLogHandle
from efflog.sink import ConsoleSink

handle = ExtensionLogHandle(ConsoleSink())

handle.log(LogLevel.INFO, SourceLocation(__file__, 7, "main"), "service started on port {}", 8080)
handle.log(LogLevel.WARN, None, "cache at {}% capacity", 85)
handle.log(LogLevel.DEBUG, None, "not shown")  # below the default level
```

Console lines look like this:

```
[2025-01-01 12:00:00] [I] [app.py:7] [4242:4243] service started on port 8080
```

The fields are the local time, the level letter (`T D I W E F`), the file
and line, the process and thread ids, and the message. `SourceLocation`
keeps only the base name of the file.

A handle takes one sink or a list of them (`None` entries are dropped). Its
`level` attribute starts at `LogLevel.INFO`; records below it are discarded.
The plain `LogHandle.log(level, loc, message)` takes the message as is.
`ConsoleSink` writes to standard output unless given another text stream,
and `set_formatter` swaps in any `efflog.formatter.Formatter`.

## Encrypted, compressed logging

The reader of the logs keeps a private key. The application only needs the
matching public key, written as hex.

```python
from efflog.crypt import binary_key_to_hex, generate_ecdh_key_pair

server_private, server_public = generate_ecdh_key_pair()
print("keep this private key safe:", binary_key_to_hex(server_private))
server_public_hex = binary_key_to_hex(server_public)
```

Configure a sink with that public key:

```python
from efflog.common import LogLevel
from efflog.effective_sink import EffectiveSink, EffectiveSinkConfig
from efflog.handle import ExtensionLogHandle

with EffectiveSink(EffectiveSinkConfig(dir="logs", prefix="app", pub_key=server_public_hex)) as sink:
    handle = ExtensionLogHandle([sink])
    handle.log(LogLevel.INFO, None, "user {} logged in", "alice")
    sink.flush()
```

`EffectiveSinkConfig` has these settings:

| field         | default                  | meaning                                      |
|---------------|--------------------------|----------------------------------------------|
| `dir`         |                          | directory for log and cache files            |
| `prefix`      |                          | file name prefix                             |
| `pub_key`     |                          | reader's ECDH public key in hex              |
| `interval`    | `timedelta(minutes=5)`   | how often old files are checked for removal  |
| `single_size` | `Space(4, Unit.MEGA)`    | size after which a new file is started       |
| `total_size`  | `Space(100, Unit.MEGA)`  | total size of `.log` files kept              |

Files are named `{prefix}_{YYYY-mm-dd HH:MM:SS}.log`. When the newest files
together pass `total_size`, the older ones are deleted.

`flush()` writes everything cached so far and waits for it. `close()` (also
called when leaving a `with` block) stops old-file removal and releases the
caches without flushing. Records that were not flushed stay in the
memory-mapped cache files in the log directory, and the next sink opened on
that directory writes them out.

## Decoding log files

Decode an encrypted log file with the reader's private key, given as hex:

```
efflog-decode "logs/app_2025-01-01 12:00:00.log" "$SERVER_PRIVATE_KEY" decoded.txt
```

The decoded text is appended to the output file; each record is followed by
an empty line. `--pattern` changes how records are rendered; the default is
`[%l][%D:%S][%p:%t][%F:%f:%#]%v`. The command exits with status 1 and a
message on standard error if the file cannot be decoded.

From Python, `efflog.decode.decode_file(input_path, pri_key, output_path,
pattern)` does the same and returns the number of chunks decoded; a pattern
of `None` gives the plain form `[level][ms][pid:tid][file:func:line]message`.
Malformed files raise `efflog.decode.DecodeError`. Patterns are rendered by
`efflog.decode_formatter.DecodeFormatter`, which understands these flags:

| flag | field                                |
|------|--------------------------------------|
| `%l` | level letter (`V D I W E F`)         |
| `%D` | local date and time                  |
| `%S` | timestamp in seconds                 |
| `%M` | timestamp in milliseconds            |
| `%p` | process id                           |
| `%t` | thread id                            |
| `%F` | file name                            |
| `%f` | function name                        |
| `%#` | line number                          |
| `%v` | the message                          |

Any other `%x` pair is copied through unchanged.

## Building blocks

The parts the sinks are built from can also be used on their own:

- `efflog.compress`: `ZstdCompress` and `ZlibCompress`, stream compressors
  whose output can be decompressed call by call.
- `efflog.crypt`: ECDH key agreement on P-256, hex helpers and `AESCrypt`
  (AES-CBC with PKCS#7 padding); failures raise `CryptError`.
- `efflog.thread_pool`, `efflog.executor`, `efflog.context`: a fixed-size
  thread pool, and an executor with serial task runners plus delayed and
  repeating tasks, shared process-wide through `Context.instance()`.
- `efflog.mmap_cache`: `MMapHandle`, a growable byte buffer backed by a
  memory-mapped file.
- `efflog.effective_formatter`: `EffectiveMsg`, the binary record format,
  with `to_bytes` and `from_bytes`.
- `efflog.space`: byte sizes in binary units (`Space`, `Unit`, `space_cast`).

## What it does not do

There is no process-wide default logger and no level-named shortcut
functions: the application creates its handles and passes them to the code
that logs.

## Running the tests

```
pip install "efflog[test]"
pytest
```