"""Lock-guarded flags shared between the advancing loop and the signal loop."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from .errors import PoisonedStateError


class SharedState:
    """Thread-safe ``paused``/``aborted`` flags.

    Every read and write acquires the lock; callers never cache a value across
    a suspension point. If an exception escapes while the lock is held the
    state is marked poisoned and all later access raises
    :class:`PoisonedStateError`.
    """

    def __init__(self, *, paused: bool = True):
        self._lock = threading.Lock()
        self._paused = paused
        self._aborted = False
        self._poisoned = False

    @contextmanager
    def guard(self) -> Iterator[None]:
        with self._lock:
            if self._poisoned:
                raise PoisonedStateError("shared pomodoro state is poisoned")
            try:
                yield
            except BaseException:
                self._poisoned = True
                raise

    @property
    def paused(self) -> bool:
        with self.guard():
            return self._paused

    @property
    def aborted(self) -> bool:
        with self.guard():
            return self._aborted

    @property
    def poisoned(self) -> bool:
        with self._lock:
            return self._poisoned

    def pause(self) -> None:
        with self.guard():
            self._paused = True

    def resume(self) -> None:
        with self.guard():
            self._paused = False

    def abort(self) -> None:
        with self.guard():
            self._aborted = True
