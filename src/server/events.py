"""JSON framing for websocket events and client control messages."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.event_protocol import (
    CONTROL_ACTIONS,
    MESSAGE_CONTROL,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)


class ControlMessageError(ValueError):
    """Raised when a websocket client sends an unusable control message."""


def make_event(
    event_type: str,
    *,
    clock: Optional[Callable[[], datetime]] = None,
    **payload: Any,
) -> str:
    """Encode one server event as a JSON text frame stamped with UTC time."""
    stamp = (clock or _utc_now)().isoformat()
    body: dict[str, Any] = {"type": event_type, "timestamp": stamp}
    body.update(payload)
    return json.dumps(body)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_control_message(raw: str | bytes) -> str:
    """Return the control action requested by a raw websocket message."""
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as error:
        raise ControlMessageError(f"Message is not valid JSON: {error}") from error

    if not isinstance(message, dict):
        raise ControlMessageError("Message must be a JSON object")
    if message.get("type") != MESSAGE_CONTROL:
        raise ControlMessageError(f"Unsupported message type: {message.get('type')!r}")

    action = message.get("action")
    normalized = action.strip().lower() if isinstance(action, str) else None
    if normalized not in CONTROL_ACTIONS:
        allowed = ", ".join(sorted(CONTROL_ACTIONS))
        raise ControlMessageError(f"Control action must be one of: {allowed}")
    return normalized


class StickyEventStore:
    """Keeps the newest frame per sticky event type for late joiners."""

    def __init__(self):
        self._latest: dict[str, str] = {}
        self._guard = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type in STICKY_EVENT_TYPES:
            with self._guard:
                self._latest[event_type] = message

    def snapshot(self) -> list[str]:
        with self._guard:
            latest = dict(self._latest)
        return [latest[kind] for kind in STICKY_EVENT_ORDER if kind in latest]
