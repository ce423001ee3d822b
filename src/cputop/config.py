"""Runtime configuration for cputop."""

from dataclasses import dataclass, replace

MIN_REFRESH_INTERVAL = 0.1


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Fixed monitor settings; the defaults match the classic console tool."""

    refresh_interval: float = 2.0  # Seconds
    visible_rows: int = 25
    name_width: int = 38
    clock_bits: int = 32

    def with_interval(self, value: float) -> "MonitorConfig":
        """Return a copy with a new refresh interval (minimum 0.1 seconds)."""
        return replace(self, refresh_interval=max(MIN_REFRESH_INTERVAL, value))

    def with_rows(self, value: int) -> "MonitorConfig":
        """Return a copy with a new visible row limit (minimum 1)."""
        return replace(self, visible_rows=max(1, value))


DEFAULT_CONFIG = MonitorConfig()
