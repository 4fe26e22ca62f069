import pytest

from efflog.compress import ZlibCompress, ZstdCompress

KINDS = ["zlib", "zstd"]


def _make(kind):
    if kind == "zlib":
        return ZlibCompress()
    return ZstdCompress()


@pytest.mark.parametrize("kind", KINDS)
def test_roundtrip_text(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    data = b"The quick brown fox jumps over the lazy dog."
    out = compressor.compress(data)
    assert len(out) > 0
    assert compressor.decompress(out) == data


@pytest.mark.parametrize("kind", KINDS)
def test_roundtrip_binary(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    data = bytes([0x00, 0x01, 0x02, 0xFF, 0xFE, 0x7F, 0x00, 0x10, 0x20, 0x30])
    out = compressor.compress(data)
    assert len(out) > 0
    result = compressor.decompress(out)
    assert len(result) == len(data)
    assert result == data


@pytest.mark.parametrize("kind", KINDS)
def test_header_detection(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    data = b"zlib header detection check"
    out = compressor.compress(data)
    assert len(out) > 0
    assert compressor.decompress(out) == data


@pytest.mark.parametrize("kind", KINDS)
def test_decompress_empty_input(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    assert compressor.decompress(b"") == b""


@pytest.mark.parametrize("kind", KINDS)
def test_decompress_wrong_data(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    assert compressor.decompress(bytes([0x01, 0x02, 0x03, 0x04])) == b""


@pytest.mark.parametrize("kind", KINDS)
def test_multiple_calls_share_stream(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    s1 = b"first"
    s2 = b"x" * 200
    o1 = compressor.compress(s1)
    assert len(o1) > 0
    assert compressor.decompress(o1) == s1
    o2 = compressor.compress(s2)
    assert len(o2) > 0
    assert compressor.decompress(o2) == s2


@pytest.mark.parametrize("kind", KINDS)
def test_output_within_bound(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    data = bytes(range(256)) * 8
    out = compressor.compress(data)
    assert 0 < len(out) <= compressor.compress_bound(len(data))


@pytest.mark.parametrize("kind", KINDS)
def test_reset_stream_starts_new_stream(kind):
    compressor = ZlibCompress() if kind == "zlib" else ZstdCompress()
    first = compressor.compress(b"alpha")
    compressor.reset_stream()
    second = compressor.compress(b"alpha")
    assert first == second
    assert compressor.decompress(second) == b"alpha"


def test_zlib_first_output_has_header():
    out = ZlibCompress().compress(b"hello hello hello")
    assert out[:2] == b"\x78\xda"


def test_zlib_second_output_has_no_header():
    zc = ZlibCompress()
    first = zc.compress(b"hello")
    second = zc.compress(b"hello")
    assert first[:2] == b"\x78\xda"
    assert second[:2] != b"\x78\xda"
    assert zc.decompress(first) == b"hello"
    assert zc.decompress(second) == b"hello"


def test_zlib_compress_bound():
    assert ZlibCompress().compress_bound(100) == 110
    assert ZlibCompress().compress_bound(0) == 10


def test_zstd_first_output_has_magic():
    out = ZstdCompress().compress(b"hello hello hello")
    assert out[:4] == b"\x28\xb5\x2f\xfd"


def test_zstd_empty_input_compresses_to_nothing():
    assert ZstdCompress().compress(b"") == b""


def test_zstd_compress_bound():
    zc = ZstdCompress()
    assert zc.compress_bound(0) == 64
    assert zc.compress_bound(131072) == 131584


def test_separate_instances_decode_each_other():
    sender = _make("zstd")
    receiver = _make("zstd")
    messages = [b"one", b"two" * 50, b"three"]
    outputs = [sender.compress(m) for m in messages]
    assert [receiver.decompress(o) for o in outputs] == messages