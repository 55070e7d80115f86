"""Advancing loop that drives a pomodoro machine forward one tick at a time."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal, Optional

from pomodoro import Phase, Pomodoro, PomodoroSnapshot
from pomodoro.constants import (
    EVENT_ABORTED,
    EVENT_CONSUMED,
    EVENT_PAUSED,
    EVENT_PHASE_COMPLETED,
    EVENT_RESUMED,
    EVENT_STARTED,
    EVENT_TICK,
    OUTCOME_ABORTED,
    OUTCOME_CONSUMED,
    OUTCOME_PAUSED,
)

RunOutcome = Literal["paused", "consumed", "aborted"]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class PomodoroEvent:
    """Event emitted by the runner after every observable state change."""
    kind: str
    snapshot: PomodoroSnapshot
    completed_phase: Optional[Phase] = None


EventCallback = Callable[[PomodoroEvent], None]


class PomodoroRunner:
    """Owns a :class:`Pomodoro` and advances it over time.

    The per-tick sleep is the only suspension point while the machine is
    active. The shared pause/abort flags are polled at loop-iteration
    boundaries, so a pause takes effect within one tick interval.
    """

    def __init__(
        self,
        pomodoro: Pomodoro,
        *,
        sleep: SleepFn = asyncio.sleep,
        on_event: Optional[EventCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._pomodoro = pomodoro
        self._sleep = sleep
        self._on_event = on_event
        self._logger = logger or logging.getLogger("pomodoro.runner")

    @property
    def pomodoro(self) -> Pomodoro:
        return self._pomodoro

    async def run(self) -> RunOutcome:
        """Force-resume the machine and advance it until it stops."""
        self._pomodoro.resume()
        self._logger.info("Pomodoro started in %s", self._pomodoro.current_status().value)
        self._emit(EVENT_STARTED)
        return await self.advance()

    async def advance(self) -> RunOutcome:
        """Advance while the machine is active, not consumed and not aborted."""
        pomodoro = self._pomodoro
        while True:
            if pomodoro.is_aborted():
                self._logger.info("Pomodoro aborted")
                self._emit(EVENT_ABORTED)
                return OUTCOME_ABORTED
            if pomodoro.is_consumed():
                self._logger.info(
                    "Pomodoro consumed after %d working cycles",
                    pomodoro.counter.working,
                )
                self._emit(EVENT_CONSUMED)
                return OUTCOME_CONSUMED
            if not pomodoro.is_active():
                self._logger.info("Pomodoro paused in %s", pomodoro.current_status().value)
                self._emit(EVENT_PAUSED)
                return OUTCOME_PAUSED

            clock = pomodoro.current_clock()
            if not clock.is_done():
                await self._sleep(clock.tick_interval.total_seconds())
                pomodoro.proceed()
                self._logger.debug(
                    "Tick: phase=%s elapsed=%s",
                    pomodoro.current_status().value,
                    clock.elapsed,
                )
                self._emit(EVENT_TICK)
                continue

            completed = pomodoro.next_cycle()
            self._emit(EVENT_PHASE_COMPLETED, completed_phase=completed)
            if not pomodoro.continuous:
                pomodoro.pause()
            # Zero-length phases complete without sleeping; let the signal task run.
            await asyncio.sleep(0)

    async def serve(self) -> RunOutcome:
        """Run until the machine is consumed or aborted, idling while paused."""
        outcome = await self.run()
        while outcome == OUTCOME_PAUSED:
            await self._wait_until_resumed()
            if self._pomodoro.is_active() and not self._pomodoro.is_aborted():
                self._logger.info("Pomodoro resumed")
                self._emit(EVENT_RESUMED)
            outcome = await self.advance()
        return outcome

    async def _wait_until_resumed(self) -> None:
        pomodoro = self._pomodoro
        while not pomodoro.is_active() and not pomodoro.is_aborted():
            # Idle polling; no clock is ticked while paused.
            await self._sleep(pomodoro.current_clock().tick_interval.total_seconds())

    def _emit(self, kind: str, *, completed_phase: Optional[Phase] = None) -> None:
        if self._on_event is None:
            return
        event = PomodoroEvent(
            kind=kind,
            snapshot=self._pomodoro.snapshot(),
            completed_phase=completed_phase,
        )
        try:
            self._on_event(event)
        except Exception as error:
            self._logger.warning("Pomodoro event handler failed: %s", error, exc_info=True)
