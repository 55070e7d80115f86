"""Websocket event types and control actions for the pomodoro event server."""

from __future__ import annotations

# Server -> client event types
EVENT_HELLO = "hello"
EVENT_POMODORO = "pomodoro"
EVENT_ERROR = "error"

# Client -> server message types
MESSAGE_CONTROL = "control"

CONTROL_PAUSE = "pause"
CONTROL_RESUME = "resume"
CONTROL_ABORT = "abort"

CONTROL_ACTIONS: frozenset[str] = frozenset({CONTROL_PAUSE, CONTROL_RESUME, CONTROL_ABORT})

STICKY_EVENT_TYPES: frozenset[str] = frozenset({EVENT_POMODORO, EVENT_ERROR})

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_POMODORO,
    EVENT_ERROR,
)
