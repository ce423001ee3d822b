"""Tests for the psutil-backed collaborators."""

import errno
import multiprocessing
import os
import time

import psutil

from cputop.models import ProcessEntry
from cputop.monitor import (
    MonotonicClock,
    ProcessController,
    ProcessEnumerator,
    cpu_times_to_ms,
    logical_cpu_count,
)


def dummy_worker(duration: float = 30.0) -> None:
    """A dummy worker process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


def dead_pid() -> int:
    """PID of a child that has already exited and been reaped."""
    p = multiprocessing.Process(target=dummy_worker, args=(0.0,))
    p.start()
    p.join(timeout=5.0)
    return p.pid


class TestProcessEnumerator:
    """Tests for ProcessEnumerator."""

    def test_list_processes_includes_self(self):
        processes = ProcessEnumerator().list_processes()

        assert len(processes) > 0
        assert os.getpid() in {pid for pid, _ in processes}
        for pid, name in processes:
            assert isinstance(pid, int)
            assert isinstance(name, str)

    def test_enumerate_returns_entries(self):
        entries = ProcessEnumerator().enumerate()

        assert len(entries) > 0
        for entry in entries:
            assert isinstance(entry, ProcessEntry)
            assert entry.cpu_time is None or entry.cpu_time >= 0

    def test_enumerate_reads_own_cpu_time(self):
        own = [e for e in ProcessEnumerator().enumerate() if e.pid == os.getpid()]

        assert len(own) == 1
        assert isinstance(own[0].cpu_time, int)

    def test_enumerate_agrees_with_per_process_lookups(self):
        """enumerate() and the single-field lookups describe the same process."""
        enumerator = ProcessEnumerator()
        own = next(e for e in enumerator.enumerate() if e.pid == os.getpid())

        assert (own.pid, own.name) in enumerator.list_processes()
        assert enumerator.cpu_time(os.getpid()) >= own.cpu_time

    def test_cpu_time_of_self(self):
        value = ProcessEnumerator().cpu_time(os.getpid())
        assert isinstance(value, int)
        assert value >= 0

    def test_cpu_time_of_missing_process(self):
        assert ProcessEnumerator().cpu_time(dead_pid()) is None

    def test_cpu_time_of_invalid_pid(self):
        assert ProcessEnumerator().cpu_time(-1) is None

    def test_unreadable_table_yields_empty_list(self, monkeypatch):
        def broken_iter(*args, **kwargs):
            raise psutil.AccessDenied()

        monkeypatch.setattr(psutil, "process_iter", broken_iter)
        enumerator = ProcessEnumerator()

        assert enumerator.enumerate() == []
        assert enumerator.list_processes() == []

    def test_denied_cpu_times_reported_as_none(self, monkeypatch):
        class FakeProc:
            info = {"pid": 4, "name": "secure", "cpu_times": None}

        monkeypatch.setattr(psutil, "process_iter", lambda attrs=None: iter([FakeProc()]))

        assert ProcessEnumerator().enumerate() == [ProcessEntry(4, "secure", None)]


class TestProcessController:
    """Tests for ProcessController."""

    def test_terminate_child(self):
        p = multiprocessing.Process(target=dummy_worker, args=(30.0,))
        p.start()
        try:
            result = ProcessController().terminate(p.pid)
            p.join(timeout=5.0)

            assert result.ok
            assert result.error_code is None
            assert str(p.pid) in result.message
            assert not p.is_alive()
        finally:
            if p.is_alive():
                p.kill()
                p.join(timeout=1.0)

    def test_terminate_missing_process(self):
        result = ProcessController().terminate(dead_pid())

        assert not result.ok
        assert result.error_code == errno.ESRCH
        assert "Error" in result.message

    def test_terminate_invalid_pid(self):
        result = ProcessController().terminate(-1)

        assert not result.ok
        assert result.error_code == errno.EINVAL


class TestMonotonicClock:
    """Tests for MonotonicClock."""

    def test_milliseconds(self):
        assert MonotonicClock(source=lambda: 12.5).now() == 12500

    def test_wraps_at_width(self):
        clock = MonotonicClock(bits=8, source=lambda: 1.0)
        assert clock.modulus == 256
        assert clock.now() == 1000 % 256

    def test_live_clock_advances(self):
        clock = MonotonicClock()
        first = clock.now()
        time.sleep(0.05)
        assert clock.now() != first


def test_logical_cpu_count():
    assert logical_cpu_count() >= 1


def test_logical_cpu_count_unknown(monkeypatch):
    monkeypatch.setattr(psutil, "cpu_count", lambda logical=True: None)
    assert logical_cpu_count() == 1


def test_cpu_times_to_ms():
    class Times:
        user = 1.25
        system = 0.5

    assert cpu_times_to_ms(Times()) == 1750
