"""Control channel, signal-consuming task, and client handle for a running timer."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Optional

from pomodoro import Pomodoro, SharedState

from .loop import EventCallback, PomodoroRunner, RunOutcome, SleepFn

DEFAULT_CHANNEL_CAPACITY = 2


class Signal(str, Enum):
    RESUME = "resume"
    PAUSE = "pause"
    ABORT = "abort"


class ControllerDetachedError(RuntimeError):
    """Raised when a client sends after the signal loop has stopped listening."""


class SignalChannel:
    """Bounded async channel of control signals with an explicit closed state."""

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be greater than zero")
        self._queue: asyncio.Queue[Signal] = asyncio.Queue(maxsize=capacity)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Mark the channel closed and fail every sender still waiting for room."""
        self._closed.set()

    async def send(self, signal: Signal) -> None:
        if self.closed:
            raise ControllerDetachedError("pomodoro controller is detached")
        if not self._queue.full():
            self._queue.put_nowait(signal)
            return

        put = asyncio.create_task(self._queue.put(signal))
        closed = asyncio.create_task(self._closed.wait())
        try:
            done, _ = await asyncio.wait((put, closed), return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in (put, closed):
                if not waiter.done():
                    waiter.cancel()
        if put not in done:
            raise ControllerDetachedError("pomodoro controller is detached")

    async def receive(self) -> Signal:
        return await self._queue.get()


async def signal_loop(
    channel: SignalChannel,
    shared: SharedState,
    *,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Apply received signals to the shared flags until ``ABORT`` arrives."""
    logger = logger or logging.getLogger("pomodoro.control")
    try:
        while True:
            signal = await channel.receive()
            logger.debug("Received signal: %s", signal.value)
            if signal is Signal.PAUSE:
                shared.pause()
            elif signal is Signal.RESUME:
                shared.resume()
            elif signal is Signal.ABORT:
                shared.abort()
                logger.info("Abort received; signal loop stopped")
                return
    finally:
        channel.close()


class PomodoroClient:
    """Lightweight handle for controlling a timer started with :func:`start`."""

    def __init__(
        self,
        channel: SignalChannel,
        *,
        timer_task: Optional[asyncio.Task[RunOutcome]] = None,
        signal_task: Optional[asyncio.Task[None]] = None,
    ):
        self._channel = channel
        self._timer_task = timer_task
        self._signal_task = signal_task

    @property
    def is_detached(self) -> bool:
        signal_task = self._signal_task
        return self._channel.closed or (signal_task is not None and signal_task.done())

    async def pause(self) -> None:
        await self._send(Signal.PAUSE)

    async def resume(self) -> None:
        await self._send(Signal.RESUME)

    async def abort(self) -> None:
        await self._send(Signal.ABORT)

    async def wait(self) -> RunOutcome:
        """Wait for the advancing loop to finish, re-raising any fault it hit."""
        if self._timer_task is None:
            raise RuntimeError("client has no timer task")
        return await self._timer_task

    async def shutdown(self) -> None:
        """Cancel whichever background tasks are still running and wait for them."""
        self._channel.close()
        pending = [
            task
            for task in (self._timer_task, self._signal_task)
            if task is not None and not task.done()
        ]
        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _send(self, signal: Signal) -> None:
        if self.is_detached:
            self._channel.close()
            raise ControllerDetachedError("pomodoro controller is detached")
        await self._channel.send(signal)


async def start(
    pomodoro: Pomodoro,
    *,
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
    sleep: SleepFn = asyncio.sleep,
    on_event: Optional[EventCallback] = None,
    logger: Optional[logging.Logger] = None,
) -> PomodoroClient:
    """Hand ``pomodoro`` to a runner and return a client for controlling it.

    Spawns the advancing task and the signal-consuming task on the running
    event loop and returns without waiting for either.
    """
    channel = SignalChannel(capacity)
    runner = PomodoroRunner(pomodoro, sleep=sleep, on_event=on_event, logger=logger)
    timer_task = asyncio.create_task(runner.serve(), name="pomodoro-timer")
    signal_task = asyncio.create_task(
        signal_loop(channel, pomodoro.shared),
        name="pomodoro-signals",
    )
    return PomodoroClient(channel, timer_task=timer_task, signal_task=signal_task)
