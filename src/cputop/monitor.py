"""psutil-backed collaborators: process table, process control and clock."""

import errno
import logging
import time
from collections.abc import Callable

import psutil

from cputop.models import ProcessEntry, TerminationResult

logger = logging.getLogger(__name__)

# Errors that mean "this one process can't be read right now"
_PROCESS_ERRORS = (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess)


def logical_cpu_count() -> int:
    """Number of logical processors, never less than 1."""
    return max(1, psutil.cpu_count(logical=True) or 1)


def cpu_times_to_ms(cpu_times) -> int:
    """Combine user and system CPU seconds into whole milliseconds."""
    return max(0, round((cpu_times.user + cpu_times.system) * 1000))


class ProcessEnumerator:
    """
    Reads the process table using psutil.

    Every method fails soft: an unreadable table yields an empty list and an
    unreadable process yields ``None`` instead of raising.

    The driver only calls enumerate(), which gathers names and CPU times in
    one process_iter() pass. list_processes() and cpu_time() are the
    per-process lookups for callers that need a single field.
    """

    def list_processes(self) -> list[tuple[int, str]]:
        """List (pid, name) for every running process."""
        try:
            return [
                (proc.info["pid"], proc.info.get("name") or "")
                for proc in psutil.process_iter(attrs=["pid", "name"])
            ]
        except (psutil.Error, OSError) as e:
            logger.warning(f"Cannot read process table: {e}")
            return []

    def cpu_time(self, pid: int) -> int | None:
        """Cumulative user+system CPU time of ``pid`` in milliseconds."""
        try:
            return cpu_times_to_ms(psutil.Process(pid).cpu_times())
        except _PROCESS_ERRORS as e:
            logger.debug(f"No CPU time for PID {pid}: {e.__class__.__name__}")
            return None
        except (ValueError, OverflowError):
            return None

    def enumerate(self) -> list[ProcessEntry]:
        """
        Enumerate processes together with their cumulative CPU time.

        Uses a single psutil.process_iter() pass; processes whose CPU times
        are denied come back with ``cpu_time=None``.
        """
        entries: list[ProcessEntry] = []
        try:
            for proc in psutil.process_iter(attrs=["pid", "name", "cpu_times"]):
                info = proc.info
                cpu_times = info.get("cpu_times")
                entries.append(
                    ProcessEntry(
                        pid=info["pid"],
                        name=info.get("name") or "",
                        cpu_time=cpu_times_to_ms(cpu_times) if cpu_times else None,
                    )
                )
        except (psutil.Error, OSError) as e:
            logger.warning(f"Cannot read process table: {e}")
            return []
        return entries


class ProcessController:
    """Terminates processes by PID."""

    def terminate(self, pid: int) -> TerminationResult:
        """
        Ask process ``pid`` to terminate.

        Does not wait for the process to exit. Failures are returned with the
        underlying errno rather than raised.
        """
        try:
            proc = psutil.Process(pid)
            proc.terminate()
        except psutil.NoSuchProcess:
            return self._failure(pid, errno.ESRCH)
        except psutil.AccessDenied:
            return self._failure(pid, errno.EPERM)
        except (ValueError, OverflowError):
            return self._failure(pid, errno.EINVAL)
        except OSError as e:
            return self._failure(pid, e.errno or errno.EIO)

        logger.info(f"Sent terminate to PID {pid}")
        return TerminationResult(pid=pid, ok=True, message=f"PID {pid} terminated.")

    @staticmethod
    def _failure(pid: int, code: int) -> TerminationResult:
        logger.warning(f"Failed to terminate PID {pid}: errno {code}")
        return TerminationResult(
            pid=pid,
            ok=False,
            error_code=code,
            message=f"Failed to terminate PID {pid}. Error: {code} ({errno.errorcode.get(code, '?')})",
        )


class MonotonicClock:
    """Millisecond tick counter that wraps like a fixed-width register."""

    def __init__(self, bits: int = 32, source: Callable[[], float] = time.monotonic) -> None:
        """
        Initialize the MonotonicClock.

        Args:
            bits: Width of the counter; ticks are reduced modulo 2**bits.
            source: Monotonic seconds source.
        """
        self._modulus = 1 << bits
        self._source = source

    @property
    def modulus(self) -> int:
        """Range of the counter."""
        return self._modulus

    def now(self) -> int:
        """Current tick count in milliseconds."""
        return int(self._source() * 1000) % self._modulus
