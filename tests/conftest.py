"""Shared fakes for the cputop tests."""

import errno
import threading

import pytest

from cputop.config import MonitorConfig
from cputop.driver import Driver
from cputop.models import ProcessEntry, TerminationResult


class FakeEnumerator:
    """Returns whatever entries the test sets."""

    def __init__(self, entries: list[ProcessEntry] | None = None) -> None:
        self.entries = entries or []
        self.calls = 0
        self.threads: list[threading.Thread] = []

    def enumerate(self) -> list[ProcessEntry]:
        self.calls += 1
        self.threads.append(threading.current_thread())
        return list(self.entries)


class FakeController:
    """Records termination requests; PIDs in ``missing`` fail with ESRCH."""

    def __init__(self, missing: set[int] | None = None) -> None:
        self.missing = missing or set()
        self.pids: list[int] = []

    def terminate(self, pid: int) -> TerminationResult:
        self.pids.append(pid)
        if pid in self.missing:
            return TerminationResult(pid, ok=False, error_code=errno.ESRCH, message=f"Failed to terminate PID {pid}.")
        return TerminationResult(pid, ok=True, message=f"PID {pid} terminated.")


class FakeClock:
    """Clock whose reading is set by the test."""

    def __init__(self, value: int = 0, modulus: int = 1 << 32) -> None:
        self.value = value
        self.modulus = modulus

    def now(self) -> int:
        return self.value % self.modulus


class FakeConsole:
    """Scripted console: replays input lines and records output."""

    def __init__(self, lines: list[str]) -> None:
        self.lines = list(lines)
        self.renders = []
        self.messages: list[str] = []
        self.said_goodbye = False

    def render(self, samples, sort_mode, config) -> None:
        self.renders.append((list(samples), sort_mode))

    def read_command(self) -> str:
        return self.lines.pop(0) if self.lines else "q"

    def acknowledge(self, message: str) -> None:
        self.messages.append(message)

    def farewell(self) -> None:
        self.said_goodbye = True


@pytest.fixture
def enumerator() -> FakeEnumerator:
    return FakeEnumerator()


@pytest.fixture
def controller() -> FakeController:
    return FakeController()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def driver(enumerator, controller, clock) -> Driver:
    """Driver on fakes with a two-core normalization."""
    return Driver(enumerator, controller, clock, config=MonitorConfig(refresh_interval=0.05), num_cores=2)


@pytest.fixture
def fake_console():
    """Factory for scripted consoles."""
    return FakeConsole
