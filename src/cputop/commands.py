"""Parsing of operator command lines."""

import re
from dataclasses import dataclass

_PID_PATTERN = re.compile(r"[0-9]+")


@dataclass(slots=True, frozen=True)
class Refresh:
    """Re-sample and redraw."""


@dataclass(slots=True, frozen=True)
class Quit:
    """Leave the monitor."""


@dataclass(slots=True, frozen=True)
class ToggleSort:
    """Switch between CPU and PID ordering."""


@dataclass(slots=True, frozen=True)
class Kill:
    """Terminate a process."""

    pid: int


@dataclass(slots=True, frozen=True)
class Invalid:
    """A line that is not a command."""

    raw: str


Command = Refresh | Quit | ToggleSort | Kill | Invalid


def _parse_pid(text: str) -> int | None:
    if _PID_PATTERN.fullmatch(text):
        return int(text)
    return None


def interpret(raw: str) -> Command:
    """
    Turn one line of input into a Command.

    ``""`` refreshes, ``q`` quits, ``s`` toggles the sort order, and
    ``k<pid>`` or a bare ``<pid>`` terminates a process. The command letter
    is case-insensitive and surrounding whitespace is ignored.
    """
    line = raw.strip()
    if not line:
        return Refresh()

    head = line[0].lower()
    if head == "q" and len(line) == 1:
        return Quit()
    if head == "s" and len(line) == 1:
        return ToggleSort()
    if head == "k":
        pid = _parse_pid(line[1:].strip())
        return Kill(pid) if pid is not None else Invalid(raw)

    pid = _parse_pid(line)
    if pid is not None:
        return Kill(pid)
    return Invalid(raw)
