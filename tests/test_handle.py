import pytest

from efflog.common import LogLevel, SourceLocation
from efflog.formatter import Formatter
from efflog.handle import ExtensionLogHandle, LogHandle
from efflog.sink import Sink


class _Recorder(Sink):
    def __init__(self):
        self.records = []

    def log(self, msg):
        self.records.append(msg)

    def set_formatter(self, formatter: Formatter):
        pass


@pytest.fixture
def sink():
    return _Recorder()


def test_default_level_filters_below_info(sink):
    handle = LogHandle([sink])
    assert handle.level is LogLevel.INFO
    handle.log(LogLevel.DEBUG, None, "dropped")
    handle.log(LogLevel.INFO, None, "kept")
    assert [r.message for r in sink.records] == ["kept"]


def test_should_log_follows_level(sink):
    handle = LogHandle(sink)
    handle.level = LogLevel.ERROR
    assert not handle.should_log(LogLevel.WARN)
    assert handle.should_log(LogLevel.ERROR)
    assert handle.should_log(LogLevel.CRITICAL)


def test_none_sinks_are_skipped(sink):
    handle = LogHandle([None, sink, None])
    assert handle.sinks == [sink]
    handle.log(LogLevel.WARN, None, "x")
    assert len(sink.records) == 1


def test_message_reaches_every_sink():
    first, second = _Recorder(), _Recorder()
    handle = LogHandle([first, second])
    loc = SourceLocation("/a/b.cpp", 3, "fn")
    handle.log(LogLevel.ERROR, loc, "boom")
    for recorder in (first, second):
        assert len(recorder.records) == 1
        assert recorder.records[0].location == loc
        assert recorder.records[0].level is LogLevel.ERROR


def test_missing_location_becomes_empty(sink):
    LogHandle(sink).log(LogLevel.INFO, None, "m")
    assert sink.records[0].location == SourceLocation()


def test_extension_handle_formats_arguments(sink):
    handle = ExtensionLogHandle(sink)
    handle.log(LogLevel.INFO, None, "count={} name={name}", 7, name="alpha")
    assert sink.records[0].message == "count=7 name=alpha"


def test_extension_handle_filters_before_formatting(sink):
    handle = ExtensionLogHandle(sink)
    handle.log(LogLevel.DEBUG, None, "{missing}")
    assert sink.records == []


def test_extension_handle_reports_bad_format(sink):
    handle = ExtensionLogHandle(sink)
    with pytest.raises(IndexError):
        handle.log(LogLevel.INFO, None, "{} {}", 1)