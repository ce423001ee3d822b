"""cputop - Textual application and command-line entry point."""

import argparse
import logging
from logging import getLogger

from rich.console import Console
from textual import work
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Input, Static

from cputop import __version__
from cputop.commands import Command, Quit, Refresh, ToggleSort, interpret
from cputop.config import DEFAULT_CONFIG, MonitorConfig
from cputop.console import ConsoleRenderer, format_header, truncate_name
from cputop.driver import Driver, LoopState
from cputop.models import ProcessSample, SortMode
from cputop.monitor import MonotonicClock, ProcessController, ProcessEnumerator, logical_cpu_count

logger = getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def default_driver(config: MonitorConfig = DEFAULT_CONFIG) -> Driver:
    """Driver wired to the live process table."""
    return Driver(
        ProcessEnumerator(),
        ProcessController(),
        MonotonicClock(bits=config.clock_bits),
        config=config,
        num_cores=logical_cpu_count(),
    )


class HeaderLine(Static):
    """Header widget showing the refresh interval and sort mode."""

    DEFAULT_CSS = """
    HeaderLine {
        height: 1;
        padding: 0 1;
        background: $surface;
        text-style: bold;
    }
    """

    header_text: str = ""

    def show(self, sort_mode: SortMode, config: MonitorConfig) -> None:
        """Update the header text."""
        self.header_text = format_header(sort_mode, config)
        self.update(self.header_text)


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, name_width: int = DEFAULT_CONFIG.name_width, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._name_width = name_width
        self._current_pids: list[int] = []

    @property
    def pids(self) -> list[int]:
        """PIDs currently shown, top to bottom."""
        return list(self._current_pids)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("Process", key="name", width=self._name_width + 2)
        table.add_column("CPU(%)", key="cpu", width=10)

    def update_processes(self, processes: list[ProcessSample]) -> None:
        """
        Replace the table contents with already ranked rows.

        Rows are rebuilt rather than patched because their order changes
        every cycle.
        """
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for proc in processes:
            table.add_row(
                str(proc.pid),
                truncate_name(proc.name, self._name_width),
                f"{proc.cpu_percent:10.2f}",
                key=str(proc.pid),
            )
        self._current_pids = [proc.pid for proc in processes]


class CputopApp(App):
    """Full-screen cputop front-end."""

    TITLE = "cputop"
    SUB_TITLE = "Process Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #command {
        dock: bottom;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("f5", "refresh", "Refresh"),
        ("f6", "sort", "Sort"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, driver: Driver | None = None, config: MonitorConfig | None = None) -> None:
        """
        Initialize the CputopApp.

        Args:
            driver: Driver to use; defaults to one wired to the live system.
            config: Settings used when building the default driver.
        """
        super().__init__()
        # App._driver is Textual's terminal driver
        self._monitor_driver = driver or default_driver(config or DEFAULT_CONFIG)
        self._refresh_timer: Timer | None = None

    @property
    def driver(self) -> Driver:
        """The driver state machine."""
        return self._monitor_driver

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderLine(id="header")
        yield ProcessTable(name_width=self._monitor_driver.config.name_width)
        yield Input(placeholder="s = sort, k<pid> or <pid> = kill, q = quit, Enter = refresh", id="command")
        yield Footer()

    def on_mount(self) -> None:
        """Take the baseline sample and schedule the first cycle."""
        self.query_one(HeaderLine).show(self._monitor_driver.sort_mode, self._monitor_driver.config)
        self._monitor_driver.prime()
        self.query_one("#command", Input).focus()
        self._schedule_cycle()

    def _schedule_cycle(self) -> None:
        """Run the next sampling pass after one refresh interval."""
        self._refresh_timer = self.set_timer(self._monitor_driver.config.refresh_interval, self._start_cycle)

    def _start_cycle(self) -> None:
        """Hand the sampling pass to a worker thread."""
        self._refresh_timer = None
        self._sample_in_background()

    @work(thread=True, exclusive=True, group="sampling")
    def _sample_in_background(self) -> None:
        """
        Run the psutil pass off the event loop.

        Commands are refused until the rows are shown, so sampling and
        command handling never overlap.
        """
        self._monitor_driver.sample()
        self.call_from_thread(self._show_cycle)

    def _show_cycle(self) -> None:
        """Rank and redraw, then wait for a command."""
        rows = self._monitor_driver.visible()
        self.query_one(HeaderLine).show(self._monitor_driver.sort_mode, self._monitor_driver.config)
        self.query_one(ProcessTable).update_processes(rows)

    def dispatch_command(self, command: Command) -> None:
        """Feed a command to the driver and act on the transition."""
        if self._monitor_driver.state is not LoopState.AWAITING_COMMAND:
            if isinstance(command, Quit):
                self.action_quit()
            else:
                self.notify("Sampling, try again in a moment", severity="warning")
            return

        transition = self._monitor_driver.handle(command)
        if transition.state is LoopState.DONE:
            self.exit()
            return

        if transition.message:
            failed = transition.termination is None or not transition.termination.ok
            self.notify(transition.message, severity="error" if failed else "information")
        self._schedule_cycle()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Interpret a submitted command line."""
        line = event.value
        event.input.value = ""
        self.dispatch_command(interpret(line))

    def action_refresh(self) -> None:
        """Handle refresh action."""
        self.dispatch_command(Refresh())

    def action_sort(self) -> None:
        """Handle sort action - toggle between CPU and PID."""
        self.dispatch_command(ToggleSort())

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        if self._refresh_timer is not None:
            self._refresh_timer.stop()
            self._refresh_timer = None
        self.exit()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(
        prog="cputop",
        description="cputop - interactive terminal process monitor",
    )
    parser.add_argument(
        "--interval", type=float, default=DEFAULT_CONFIG.refresh_interval, help="Refresh interval in seconds"
    )
    parser.add_argument("--rows", type=int, default=DEFAULT_CONFIG.visible_rows, help="Number of rows to show")
    parser.add_argument("--tui", action="store_true", help="Use the full-screen interface")
    parser.add_argument("--log-file", type=str, default=None, help="Write log messages to this file")
    parser.add_argument(
        "--log-level", type=str.upper, default="INFO", choices=LOG_LEVELS, help="Logging level"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(log_file: str | None, log_level: str = "INFO") -> None:
    """Send log records to ``log_file``; the terminal is left to the UI."""
    if log_file is None:
        return
    logging.basicConfig(
        filename=log_file,
        level=log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for cputop."""
    args = parse_args(argv)
    configure_logging(args.log_file, args.log_level)
    config = DEFAULT_CONFIG.with_interval(args.interval).with_rows(args.rows)
    logger.info(f"Starting cputop {__version__} (interval={config.refresh_interval}s, rows={config.visible_rows})")

    if args.tui:
        CputopApp(config=config).run()
        return

    console = Console(highlight=False)
    try:
        default_driver(config).run(ConsoleRenderer(console))
    except KeyboardInterrupt:
        console.print("\nExiting monitor.", markup=False)


if __name__ == "__main__":
    main()
