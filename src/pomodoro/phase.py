"""Closed set of pomodoro phases and the fixed cycle between them."""

from __future__ import annotations

from enum import Enum

from .constants import PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASE_WORKING


class Phase(str, Enum):
    WORKING = PHASE_WORKING
    SHORT_BREAK = PHASE_SHORT_BREAK
    LONG_BREAK = PHASE_LONG_BREAK


# Successor of each phase when no long break is due.
NEXT_PHASE: dict[Phase, Phase] = {
    Phase.WORKING: Phase.SHORT_BREAK,
    Phase.SHORT_BREAK: Phase.WORKING,
    Phase.LONG_BREAK: Phase.WORKING,
}
