from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.event_protocol import EVENT_POMODORO

from .loop import PomodoroEvent


class EventSink(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeEventPublisher:
    def __init__(self, sink: Optional[EventSink]):
        self._sink = sink

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._sink is not None:
            self._sink.publish(event_type, **payload)

    def publish_pomodoro_event(self, event: PomodoroEvent) -> None:
        snapshot = event.snapshot
        payload: dict[str, Any] = {
            "action": event.kind,
            "phase": snapshot.phase.value,
            "working_count": snapshot.working_count,
            "short_break_count": snapshot.short_break_count,
            "long_break_count": snapshot.long_break_count,
            "elapsed_seconds": snapshot.elapsed_seconds,
            "remaining_seconds": snapshot.remaining_seconds,
            "paused": snapshot.paused,
            "consumed": snapshot.consumed,
        }
        if event.completed_phase is not None:
            payload["completed_phase"] = event.completed_phase.value
        self.publish(EVENT_POMODORO, **payload)
