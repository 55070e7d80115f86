"""Runtime exports for driving and controlling a pomodoro machine."""

from .control import (
    ControllerDetachedError,
    PomodoroClient,
    Signal,
    SignalChannel,
    signal_loop,
    start,
)
from .loop import PomodoroEvent, PomodoroRunner, RunOutcome
from .publisher import RuntimeEventPublisher

__all__ = [
    "ControllerDetachedError",
    "PomodoroClient",
    "PomodoroEvent",
    "PomodoroRunner",
    "RunOutcome",
    "RuntimeEventPublisher",
    "Signal",
    "SignalChannel",
    "signal_loop",
    "start",
]
