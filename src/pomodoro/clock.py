"""Tick-based phase clock."""

from __future__ import annotations

import datetime as dt

from .errors import PomodoroConfigurationError

_ZERO = dt.timedelta(0)


class Clock:
    """Accumulates fixed-size ticks against a lifespan.

    Elapsed time advances only through :meth:`tick`, never by sampling a wall
    clock, so ``n`` ticks from zero always yield exactly ``n * tick_interval``.
    """

    def __init__(self, lifespan: dt.timedelta, tick_interval: dt.timedelta):
        if lifespan < _ZERO:
            raise PomodoroConfigurationError("lifespan must not be negative")
        if tick_interval <= _ZERO:
            raise PomodoroConfigurationError("tick_interval must be greater than zero")

        self._lifespan = lifespan
        self._tick_interval = tick_interval
        self._elapsed = _ZERO

    @classmethod
    def from_seconds(cls, lifespan_seconds: float, tick_seconds: float) -> "Clock":
        return cls(
            dt.timedelta(seconds=lifespan_seconds),
            dt.timedelta(seconds=tick_seconds),
        )

    @property
    def lifespan(self) -> dt.timedelta:
        return self._lifespan

    @property
    def tick_interval(self) -> dt.timedelta:
        return self._tick_interval

    @property
    def elapsed(self) -> dt.timedelta:
        return self._elapsed

    @property
    def remaining(self) -> dt.timedelta:
        return max(self._lifespan - self._elapsed, _ZERO)

    def reset(self) -> None:
        self._elapsed = _ZERO

    def tick(self) -> None:
        # Not clamped: elapsed may overshoot lifespan by up to one interval.
        self._elapsed += self._tick_interval

    def is_done(self) -> bool:
        return self._elapsed >= self._lifespan

    def __repr__(self) -> str:
        return (
            f"Clock(lifespan={self._lifespan!r}, tick_interval={self._tick_interval!r}, "
            f"elapsed={self._elapsed!r})"
        )
