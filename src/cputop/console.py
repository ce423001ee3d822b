"""Line-mode console front-end built on rich."""

from typing import TextIO

from rich.console import Console

from cputop.config import DEFAULT_CONFIG, MonitorConfig
from cputop.models import ProcessSample, SortMode

PROMPT = "Enter: "
HELP_LINE = "Commands: (s)ort  (k)ill PID  (q)uit  (Enter) refresh"
PID_WIDTH = 8
CPU_WIDTH = 10


def truncate_name(name: str, width: int = DEFAULT_CONFIG.name_width) -> str:
    """Shorten ``name`` to ``width`` characters, marking the cut with '...'."""
    if len(name) <= width:
        return name
    return name[: width - 1] + "..."


def format_header(sort_mode: SortMode, config: MonitorConfig = DEFAULT_CONFIG) -> str:
    """Title line with the refresh interval and sort mode."""
    return f"cputop  |  Refresh {config.refresh_interval:g}s  |  Sort: {sort_mode.value.upper()}"


def format_columns(config: MonitorConfig = DEFAULT_CONFIG) -> str:
    """Column titles aligned with format_row()."""
    return f"{'PID':<{PID_WIDTH}}{'Process':<{config.name_width + 2}}{'CPU(%)':>{CPU_WIDTH}}"


def format_row(sample: ProcessSample, config: MonitorConfig = DEFAULT_CONFIG) -> str:
    """One fixed-width table row."""
    name = truncate_name(sample.name, config.name_width)
    return (
        f"{sample.pid:<{PID_WIDTH}}"
        f"{name:<{config.name_width + 2}}"
        f"{sample.cpu_percent:>{CPU_WIDTH}.2f}"
    )


class ConsoleRenderer:
    """
    Draws the process table and reads command lines.

    Rows are plain fixed-width text; only the header carries styling.
    """

    def __init__(self, console: Console | None = None, stream: TextIO | None = None) -> None:
        """
        Initialize ConsoleRenderer.

        Args:
            console: rich Console to write to. Defaults to stdout.
            stream: Read input from this stream instead of the terminal.
        """
        self._console = console or Console(highlight=False)
        self._stream = stream

    def render(
        self,
        samples: list[ProcessSample],
        sort_mode: SortMode,
        config: MonitorConfig = DEFAULT_CONFIG,
    ) -> None:
        """Clear the screen and draw the header, rows and command help."""
        console = self._console
        console.clear()
        console.print(format_header(sort_mode, config), style="bold", markup=False)
        console.print(format_columns(config), markup=False)
        console.print("-" * (PID_WIDTH + config.name_width + 2 + CPU_WIDTH), markup=False)
        for sample in samples[: config.visible_rows]:
            console.print(format_row(sample, config), markup=False)
        console.print()
        console.print(HELP_LINE, markup=False)

    def _read_line(self, prompt: str) -> str | None:
        """Read one line; None means end of input."""
        try:
            line = self._console.input(prompt, markup=False, stream=self._stream)
        except EOFError:
            return None
        if self._stream is not None and not line:
            return None
        return line.rstrip("\r\n")

    def read_command(self) -> str:
        """Prompt for a command. End of input reads as 'q'."""
        line = self._read_line(PROMPT)
        return "q" if line is None else line

    def acknowledge(self, message: str) -> None:
        """Show a message and wait for Enter."""
        self._console.print(message, markup=False)
        self._read_line("Press Enter to continue...")

    def farewell(self) -> None:
        """Say goodbye on exit."""
        self._console.print("Exiting monitor.", markup=False)
