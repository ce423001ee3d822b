"""Ordering of sampled processes."""

from collections.abc import Iterable

from cputop.models import ProcessSample, SortMode


def rank(samples: Iterable[ProcessSample], mode: SortMode) -> list[ProcessSample]:
    """Sort samples for display; the order is total, so ranking is idempotent."""
    if mode is SortMode.CPU:
        return sorted(samples, key=lambda s: (-s.cpu_percent, s.pid))
    return sorted(samples, key=lambda s: s.pid)


def toggle(mode: SortMode) -> SortMode:
    """Flip between CPU and PID ordering."""
    return SortMode.PID if mode is SortMode.CPU else SortMode.CPU
