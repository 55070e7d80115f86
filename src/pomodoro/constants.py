"""Phase, event, and default constants used by pomodoro cycle logic."""

from __future__ import annotations

DEFAULT_WORKING_SECONDS = 25 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_TICK_SECONDS = 1.0
DEFAULT_LONG_BREAK_INTERVAL = 4

PHASE_WORKING = "working"
PHASE_SHORT_BREAK = "short_break"
PHASE_LONG_BREAK = "long_break"

EVENT_STARTED = "started"
EVENT_TICK = "tick"
EVENT_PHASE_COMPLETED = "phase_completed"
EVENT_PAUSED = "paused"
EVENT_RESUMED = "resumed"
EVENT_CONSUMED = "consumed"
EVENT_ABORTED = "aborted"

OUTCOME_PAUSED = "paused"
OUTCOME_CONSUMED = "consumed"
OUTCOME_ABORTED = "aborted"
