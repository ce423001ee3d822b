"""Driver loop: owns the sampling state and sequences each cycle."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from cputop import sampler
from cputop.commands import Command, Invalid, Kill, Quit, Refresh, ToggleSort, interpret
from cputop.console import ConsoleRenderer
from cputop.config import DEFAULT_CONFIG, MonitorConfig
from cputop.models import ProcessSample, SamplingState, SortMode, TerminationResult
from cputop.monitor import MonotonicClock, ProcessController, ProcessEnumerator
from cputop.ranking import rank, toggle

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """States of the monitor loop."""

    SAMPLING = "sampling"
    RENDERING = "rendering"
    AWAITING_COMMAND = "awaiting_command"
    TERMINATING = "terminating"
    DONE = "done"


@dataclass(slots=True, frozen=True)
class Transition:
    """Result of handling one command."""

    state: LoopState
    message: str | None = None
    termination: TerminationResult | None = None


class Driver:
    """
    State machine behind both front-ends.

    Sampling -> Rendering -> AwaitingCommand -> {Sampling | Done}, with Kill
    passing through Terminating on its way back to Sampling. Each step is a
    method, so the contract for every command can be checked without a
    terminal.
    """

    def __init__(
        self,
        enumerator: ProcessEnumerator,
        controller: ProcessController,
        clock: MonotonicClock,
        config: MonitorConfig = DEFAULT_CONFIG,
        num_cores: int = 1,
    ) -> None:
        """
        Initialize the Driver.

        Args:
            enumerator: Source of ProcessEntry lists.
            controller: Used to terminate processes.
            clock: Cyclic millisecond tick source.
            config: Refresh interval and visible row limit.
            num_cores: Logical processor count for normalization.
        """
        self._enumerator = enumerator
        self._controller = controller
        self._clock = clock
        self._config = config
        self._num_cores = max(1, num_cores)
        self._state = LoopState.SAMPLING
        self._sampling_state = SamplingState(timestamp=clock.now())
        self._sort_mode = SortMode.CPU
        self._samples: list[ProcessSample] = []

    @property
    def state(self) -> LoopState:
        """Current loop state."""
        return self._state

    @property
    def sort_mode(self) -> SortMode:
        """Current sort mode."""
        return self._sort_mode

    @property
    def sampling_state(self) -> SamplingState:
        """State carried into the next sampling pass."""
        return self._sampling_state

    @property
    def samples(self) -> list[ProcessSample]:
        """Samples from the last sampling pass, unsorted."""
        return list(self._samples)

    @property
    def config(self) -> MonitorConfig:
        """Monitor configuration."""
        return self._config

    def _expect(self, *states: LoopState) -> None:
        if self._state not in states:
            raise RuntimeError(f"Invalid transition from {self._state.value}")

    def _enter(self, state: LoopState) -> None:
        logger.debug(f"{self._state.value} -> {state.value}")
        self._state = state

    def prime(self) -> None:
        """Record baseline CPU times from a zero-length interval."""
        self._expect(LoopState.SAMPLING)
        timestamp = self._clock.now()
        _, self._sampling_state = sampler.sample(
            SamplingState(timestamp=timestamp),
            self._enumerator.enumerate(),
            timestamp,
            self._num_cores,
            self._clock.modulus,
        )

    def sample(self) -> list[ProcessSample]:
        """Run one sampling pass and move to Rendering."""
        self._expect(LoopState.SAMPLING)
        samples, new_state = sampler.sample(
            self._sampling_state,
            self._enumerator.enumerate(),
            self._clock.now(),
            self._num_cores,
            self._clock.modulus,
        )
        self._samples = samples
        self._sampling_state = new_state
        self._enter(LoopState.RENDERING)
        return list(samples)

    def visible(self) -> list[ProcessSample]:
        """Ranked rows to display; moves to AwaitingCommand."""
        self._expect(LoopState.RENDERING, LoopState.AWAITING_COMMAND)
        rows = rank(self._samples, self._sort_mode)[: self._config.visible_rows]
        self._enter(LoopState.AWAITING_COMMAND)
        return rows

    def handle(self, command: Command) -> Transition:
        """Apply a command received while awaiting input."""
        self._expect(LoopState.AWAITING_COMMAND)

        if isinstance(command, Quit):
            self._enter(LoopState.DONE)
            return Transition(LoopState.DONE)

        if isinstance(command, ToggleSort):
            self._sort_mode = toggle(self._sort_mode)
            self._enter(LoopState.SAMPLING)
            return Transition(LoopState.SAMPLING)

        if isinstance(command, Kill):
            self._enter(LoopState.TERMINATING)
            result = self._controller.terminate(command.pid)
            self._enter(LoopState.SAMPLING)
            return Transition(LoopState.SAMPLING, message=result.message, termination=result)

        if isinstance(command, Invalid):
            logger.debug(f"Invalid input: {command.raw!r}")
            self._enter(LoopState.SAMPLING)
            return Transition(LoopState.SAMPLING, message="Invalid input.")

        if isinstance(command, Refresh):
            self._enter(LoopState.SAMPLING)
            return Transition(LoopState.SAMPLING)

        raise TypeError(f"Unknown command: {command!r}")

    def run(self, console: ConsoleRenderer, sleep: Callable[[float], None] = time.sleep) -> None:
        """
        Blocking loop for the line-mode console.

        Waits one refresh interval before every sampling pass so each reading
        covers a full interval. Returns after Quit.
        """
        self.prime()
        while self._state is not LoopState.DONE:
            sleep(self._config.refresh_interval)
            self.sample()
            console.render(self.visible(), self._sort_mode, self._config)
            transition = self.handle(interpret(console.read_command()))
            if transition.message:
                console.acknowledge(transition.message)
        console.farewell()
