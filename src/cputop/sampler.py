"""CPU utilization sampling from cumulative CPU-time deltas."""

from collections.abc import Iterable
from types import MappingProxyType

from cputop.models import CpuTimeRecord, ProcessEntry, ProcessSample, SamplingState

DEFAULT_MODULUS = 1 << 32


def elapsed_ticks(previous: int, current: int, modulus: int = DEFAULT_MODULUS) -> int:
    """Ticks between two readings of a cyclic counter of range ``modulus``."""
    if current < previous:
        current += modulus
    return (current - previous) % modulus


def cpu_percent(previous: int, current: int, elapsed: int, num_cores: int) -> float:
    """
    CPU utilization over ``elapsed`` ticks, normalized across cores.

    A negative delta (PID reused by an unrelated process) counts as zero.
    """
    if elapsed <= 0:
        return 0.0
    delta = max(0, current - previous)
    usage = delta / (elapsed * max(1, num_cores)) * 100.0
    return max(0.0, usage)


def sample(
    state: SamplingState,
    entries: Iterable[ProcessEntry],
    timestamp: int,
    num_cores: int,
    modulus: int = DEFAULT_MODULUS,
) -> tuple[list[ProcessSample], SamplingState]:
    """
    Derive per-process CPU usage and the state for the next cycle.

    Args:
        state: State produced by the previous cycle.
        entries: Current enumeration. Entries with ``cpu_time=None`` are
            reported at 0% and left out of the new state.
        timestamp: Current clock reading, same unit as ``cpu_time``.
        num_cores: Logical processor count (clamped to at least 1).
        modulus: Range of the clock counter.

    Returns:
        The unsorted samples and a fresh SamplingState holding only the
        processes seen in this cycle.
    """
    elapsed = elapsed_ticks(state.timestamp, timestamp, modulus)
    cores = max(1, num_cores)

    samples: list[ProcessSample] = []
    records: dict[int, CpuTimeRecord] = {}

    for entry in entries:
        usage = 0.0
        if entry.cpu_time is not None:
            records[entry.pid] = CpuTimeRecord(pid=entry.pid, cpu_time=entry.cpu_time)
            previous = state.records.get(entry.pid)
            if previous is not None:
                usage = cpu_percent(previous.cpu_time, entry.cpu_time, elapsed, cores)
        samples.append(ProcessSample(pid=entry.pid, name=entry.name, cpu_percent=usage))

    return samples, SamplingState(records=MappingProxyType(records), timestamp=timestamp)
