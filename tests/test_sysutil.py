import os
import threading
import time

from efflog.sysutil import file_size, local_time, page_size, process_id, thread_id


def test_page_size_is_positive_power_of_two():
    size = page_size()
    assert size > 0
    assert size & (size - 1) == 0


def test_process_id_matches_os():
    assert process_id() == os.getpid()


def test_thread_ids_differ_between_threads():
    seen = []
    worker = threading.Thread(target=lambda: seen.append(thread_id()))
    worker.start()
    worker.join()
    main_id = thread_id()
    assert main_id > 0
    assert main_id == thread_id()
    assert len(seen) == 1
    assert seen[0] > 0
    assert seen[0] != main_id


def test_local_time_round_trips_through_mktime():
    stamp = 1_700_000_000
    assert time.mktime(local_time(stamp)) == stamp


def test_local_time_defaults_to_now():
    before = time.time()
    now = time.mktime(local_time())
    assert abs(now - before) < 5


def test_file_size_of_regular_file(tmp_path):
    path = tmp_path / "data.bin"
    payload = b"abcdef" * 10
    path.write_bytes(payload)
    assert file_size(path) == len(payload)


def test_file_size_of_directory_and_missing_file(tmp_path):
    assert file_size(tmp_path) == 0
    assert file_size(tmp_path / "missing") == 0