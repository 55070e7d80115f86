"""Per-phase completion counters."""

from __future__ import annotations

from dataclasses import dataclass

from .phase import Phase


@dataclass
class Counter:
    """Monotonic completion counts, one slot per phase."""
    working: int = 0
    short_break: int = 0
    long_break: int = 0

    def increment_working(self) -> None:
        self.working += 1

    def increment_short_break(self) -> None:
        self.short_break += 1

    def increment_long_break(self) -> None:
        self.long_break += 1

    def current_working(self) -> int:
        return self.working

    def current_short_break(self) -> int:
        return self.short_break

    def current_long_break(self) -> int:
        return self.long_break

    def increment(self, phase: Phase) -> None:
        setattr(self, phase.value, getattr(self, phase.value) + 1)

    def current(self, phase: Phase) -> int:
        return getattr(self, phase.value)
