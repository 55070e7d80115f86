"""Error types raised by the pomodoro cycle engine."""

from __future__ import annotations


class PomodoroError(Exception):
    """Base class for pomodoro engine failures."""


class PomodoroConfigurationError(PomodoroError, ValueError):
    """Raised when clocks or machine options are invalid at construction time."""


class PoisonedStateError(PomodoroError):
    """Raised when shared state is accessed after a holder failed under its lock."""
