from .clock import Clock
from .constants import (
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_TICK_SECONDS,
    DEFAULT_WORKING_SECONDS,
)
from .counter import Counter
from .errors import PoisonedStateError, PomodoroConfigurationError, PomodoroError
from .machine import Pomodoro, PomodoroSnapshot
from .phase import Phase
from .shared import SharedState

__all__ = [
    "Clock",
    "Counter",
    "DEFAULT_LONG_BREAK_INTERVAL",
    "DEFAULT_LONG_BREAK_SECONDS",
    "DEFAULT_SHORT_BREAK_SECONDS",
    "DEFAULT_TICK_SECONDS",
    "DEFAULT_WORKING_SECONDS",
    "Phase",
    "PoisonedStateError",
    "Pomodoro",
    "PomodoroConfigurationError",
    "PomodoroError",
    "PomodoroSnapshot",
    "SharedState",
]
