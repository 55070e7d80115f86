"""Pomodoro phase state machine over three tick-based clocks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .clock import Clock
from .counter import Counter
from .errors import PomodoroConfigurationError
from .phase import NEXT_PHASE, Phase
from .shared import SharedState


@dataclass(frozen=True)
class PomodoroSnapshot:
    """Immutable machine snapshot exposed to the runner and publishers."""
    phase: Phase
    working_count: int
    short_break_count: int
    long_break_count: int
    elapsed_seconds: float
    lifespan_seconds: float
    paused: bool
    consumed: bool

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self.lifespan_seconds - self.elapsed_seconds)


class Pomodoro:
    """Cycles Working, ShortBreak and LongBreak phases.

    Phase, clock and counter mutation belongs to the advancing loop only. The
    :class:`SharedState` is the one object handed to other tasks.
    """

    def __init__(
        self,
        working: Clock,
        short_break: Clock,
        long_break: Clock,
        *,
        long_break_interval: int,
        continuous: bool = True,
        until: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if isinstance(long_break_interval, bool) or not isinstance(long_break_interval, int):
            raise PomodoroConfigurationError("long_break_interval must be an integer")
        if long_break_interval < 1:
            raise PomodoroConfigurationError("long_break_interval must be greater than zero")
        if until is not None and (isinstance(until, bool) or not isinstance(until, int)):
            raise PomodoroConfigurationError("until must be an integer")
        if until is not None and until < 1:
            raise PomodoroConfigurationError("until must be greater than zero")
        if not any((working.lifespan, short_break.lifespan, long_break.lifespan)):
            raise PomodoroConfigurationError("at least one phase needs a non-zero lifespan")

        self._clocks: dict[Phase, Clock] = {
            Phase.WORKING: working,
            Phase.SHORT_BREAK: short_break,
            Phase.LONG_BREAK: long_break,
        }
        self._long_break_interval = long_break_interval
        self._continuous = bool(continuous)
        self._until = until
        self._counter = Counter()
        self._current_phase = Phase.WORKING
        self._shared = SharedState(paused=True)
        self._logger = logger or logging.getLogger("pomodoro")

    @property
    def counter(self) -> Counter:
        return self._counter

    @property
    def shared(self) -> SharedState:
        return self._shared

    @property
    def continuous(self) -> bool:
        return self._continuous

    @property
    def until(self) -> Optional[int]:
        return self._until

    @property
    def long_break_interval(self) -> int:
        return self._long_break_interval

    def clock(self, phase: Phase) -> Clock:
        return self._clocks[phase]

    def current_status(self) -> Phase:
        return self._current_phase

    def current_clock(self) -> Clock:
        return self._clocks[self._current_phase]

    def is_consumed(self) -> bool:
        if self._until is None:
            return False
        return self._counter.current_working() >= self._until

    def reached_long_break(self) -> bool:
        completed = self._counter.current_working()
        return completed > 0 and completed % self._long_break_interval == 0

    def next_status(self) -> Phase:
        current = self._current_phase
        if not self.current_clock().is_done():
            return current
        if current is not Phase.LONG_BREAK and self.reached_long_break():
            return Phase.LONG_BREAK
        return NEXT_PHASE[current]

    def next_cycle(self) -> Phase:
        """Complete the current phase and move to the next one.

        Returns the phase that was just completed.
        """
        completed = self._current_phase
        self._counter.increment(completed)
        upcoming = self.next_status()
        # The clock being left restarts from zero on its next visit.
        self.current_clock().reset()
        self._current_phase = upcoming
        self._logger.info(
            "Phase completed: %s -> %s (working=%d short_break=%d long_break=%d)",
            completed.value,
            upcoming.value,
            self._counter.working,
            self._counter.short_break,
            self._counter.long_break,
        )
        return completed

    def proceed(self) -> None:
        self.current_clock().tick()

    def is_active(self) -> bool:
        return not self._shared.paused

    def is_aborted(self) -> bool:
        return self._shared.aborted

    def pause(self) -> None:
        self._shared.pause()

    def resume(self) -> None:
        self._shared.resume()

    def snapshot(self) -> PomodoroSnapshot:
        clock = self.current_clock()
        return PomodoroSnapshot(
            phase=self._current_phase,
            working_count=self._counter.working,
            short_break_count=self._counter.short_break,
            long_break_count=self._counter.long_break,
            elapsed_seconds=clock.elapsed.total_seconds(),
            lifespan_seconds=clock.lifespan.total_seconds(),
            paused=self._shared.paused,
            consumed=self.is_consumed(),
        )
