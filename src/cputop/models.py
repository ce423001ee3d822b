"""Data models for cputop."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class SortMode(Enum):
    """Sort modes for the process view."""

    CPU = "cpu"  # cpu_percent descending, ties by pid
    PID = "pid"


@dataclass(slots=True, frozen=True)
class ProcessEntry:
    """One enumerated process, as reported by the process table."""

    pid: int
    name: str
    cpu_time: int | None  # Cumulative user+system milliseconds, None if unqueryable


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable per-cycle view of a process."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0, normalized over all logical cores


@dataclass(slots=True, frozen=True)
class CpuTimeRecord:
    """Cumulative CPU time observed for a process in one cycle."""

    pid: int
    cpu_time: int


@dataclass(slots=True, frozen=True)
class SamplingState:
    """
    State carried from one sampling cycle to the next.

    Replaced as a whole after every cycle; never updated in place.
    """

    records: Mapping[int, CpuTimeRecord] = field(default_factory=dict)
    timestamp: int = 0


@dataclass(slots=True, frozen=True)
class TerminationResult:
    """Outcome of a termination request."""

    pid: int
    ok: bool
    error_code: int | None = None
    message: str = ""
