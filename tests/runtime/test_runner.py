import asyncio
import contextlib
import datetime as dt
import unittest

from pomodoro import Clock, PoisonedStateError, Pomodoro
from runtime import ControllerDetachedError, PomodoroEvent, PomodoroRunner, start


async def _yield(_seconds: float) -> None:
    await asyncio.sleep(0)


def _clock(lifespan_us: int = 1, tick_us: int = 1) -> Clock:
    return Clock(dt.timedelta(microseconds=lifespan_us), dt.timedelta(microseconds=tick_us))


def _pomodoro(**options) -> Pomodoro:
    options.setdefault("long_break_interval", 2)
    return Pomodoro(_clock(), _clock(), _clock(), **options)


async def _wait_for(predicate, *, attempts: int = 500) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class PomodoroRunnerTests(unittest.IsolatedAsyncioTestCase):
    async def test_continuous_run_stops_when_consumed(self) -> None:
        pomodoro = Pomodoro(
            _clock(lifespan_us=2),
            _clock(lifespan_us=3),
            _clock(lifespan_us=4),
            long_break_interval=2,
            continuous=True,
            until=3,
        )

        outcome = await PomodoroRunner(pomodoro, sleep=_yield).run()

        self.assertEqual("consumed", outcome)
        self.assertTrue(pomodoro.is_consumed())
        self.assertEqual(3, pomodoro.counter.working)
        self.assertEqual(1, pomodoro.counter.short_break)
        self.assertEqual(1, pomodoro.counter.long_break)

    async def test_one_tick_phases_with_real_sleep(self) -> None:
        pomodoro = _pomodoro(continuous=True, until=3)

        outcome = await asyncio.wait_for(PomodoroRunner(pomodoro).run(), timeout=5.0)

        self.assertEqual("consumed", outcome)
        self.assertEqual(3, pomodoro.counter.working)
        self.assertEqual(1, pomodoro.counter.short_break)
        self.assertEqual(1, pomodoro.counter.long_break)

    async def test_step_mode_pauses_after_one_phase(self) -> None:
        pomodoro = _pomodoro(continuous=False)

        outcome = await PomodoroRunner(pomodoro, sleep=_yield).run()

        self.assertEqual("paused", outcome)
        self.assertFalse(pomodoro.is_active())
        self.assertEqual(1, pomodoro.counter.working)
        self.assertEqual(0, pomodoro.counter.short_break)
        self.assertEqual(0, pomodoro.counter.long_break)

    async def test_run_force_resumes_a_paused_machine(self) -> None:
        pomodoro = _pomodoro(continuous=True, until=1)
        pomodoro.pause()

        outcome = await PomodoroRunner(pomodoro, sleep=_yield).run()

        self.assertEqual("consumed", outcome)
        self.assertEqual(1, pomodoro.counter.working)

    async def test_sleeps_one_tick_interval_per_tick(self) -> None:
        slept: list[float] = []

        async def record(seconds: float) -> None:
            slept.append(seconds)

        pomodoro = Pomodoro(
            Clock.from_seconds(3, 1),
            Clock.from_seconds(1, 0.5),
            Clock.from_seconds(1, 1),
            long_break_interval=4,
            until=1,
        )

        await PomodoroRunner(pomodoro, sleep=record).run()

        self.assertEqual([1.0, 1.0, 1.0], slept)

    async def test_emits_lifecycle_events(self) -> None:
        events: list[PomodoroEvent] = []
        pomodoro = _pomodoro(continuous=True, until=1)

        await PomodoroRunner(pomodoro, sleep=_yield, on_event=events.append).run()

        kinds = [event.kind for event in events]
        self.assertEqual(["started", "tick", "phase_completed", "consumed"], kinds)
        self.assertEqual("working", events[2].completed_phase.value)
        self.assertTrue(events[-1].snapshot.consumed)

    async def test_failing_event_handler_does_not_stop_timer(self) -> None:
        def broken(_event: PomodoroEvent) -> None:
            raise RuntimeError("publisher down")

        pomodoro = _pomodoro(continuous=True, until=2)

        with self.assertLogs("pomodoro.runner", level="WARNING"):
            outcome = await PomodoroRunner(pomodoro, sleep=_yield, on_event=broken).run()

        self.assertEqual("consumed", outcome)
        self.assertEqual(2, pomodoro.counter.working)


class StartedTimerTests(unittest.IsolatedAsyncioTestCase):
    async def _start(self, pomodoro: Pomodoro):
        client = await start(pomodoro, sleep=_yield)
        self.addAsyncCleanup(client.shutdown)
        return client

    async def test_pause_stops_progress_within_one_tick(self) -> None:
        pomodoro = _pomodoro(continuous=True)
        client = await self._start(pomodoro)

        await _wait_for(lambda: pomodoro.counter.working >= 2)
        await client.pause()
        await _wait_for(lambda: not pomodoro.is_active())
        for _ in range(5):
            await asyncio.sleep(0)

        counts = (
            pomodoro.counter.working,
            pomodoro.counter.short_break,
            pomodoro.counter.long_break,
        )
        for _ in range(50):
            await asyncio.sleep(0)

        self.assertEqual(
            counts,
            (
                pomodoro.counter.working,
                pomodoro.counter.short_break,
                pomodoro.counter.long_break,
            ),
        )

        await client.pause()
        for _ in range(20):
            await asyncio.sleep(0)
        self.assertEqual(counts[0], pomodoro.counter.working)

    async def test_resume_continues_step_mode_until_consumed(self) -> None:
        pomodoro = _pomodoro(continuous=False, until=2)
        client = await self._start(pomodoro)

        await _wait_for(lambda: pomodoro.counter.working == 1 and not pomodoro.is_active())
        await client.resume()
        await client.resume()
        await _wait_for(lambda: pomodoro.counter.short_break == 1 and not pomodoro.is_active())
        self.assertEqual(1, pomodoro.counter.working)
        await client.resume()

        outcome = await asyncio.wait_for(client.wait(), timeout=5.0)

        self.assertEqual("consumed", outcome)
        self.assertEqual(2, pomodoro.counter.working)
        self.assertEqual(1, pomodoro.counter.short_break)

    async def test_abort_stops_timer_and_detaches_client(self) -> None:
        pomodoro = _pomodoro(continuous=True)
        client = await self._start(pomodoro)

        await _wait_for(lambda: pomodoro.counter.working >= 1)
        await client.abort()
        outcome = await asyncio.wait_for(client.wait(), timeout=5.0)

        self.assertEqual("aborted", outcome)
        self.assertTrue(client.is_detached)
        with self.assertRaises(ControllerDetachedError):
            await client.resume()

    async def test_zero_length_phases_still_yield_to_abort(self) -> None:
        pomodoro = Pomodoro(
            _clock(lifespan_us=0),
            _clock(lifespan_us=0),
            Clock.from_seconds(60, 60),
            long_break_interval=10**6,
        )
        client = await start(pomodoro)
        self.addAsyncCleanup(client.shutdown)

        await _wait_for(lambda: pomodoro.counter.working >= 3)
        await client.abort()
        outcome = await asyncio.wait_for(client.wait(), timeout=5.0)

        self.assertEqual("aborted", outcome)
        self.assertEqual(0, pomodoro.counter.long_break)

    async def test_abort_while_paused(self) -> None:
        pomodoro = _pomodoro(continuous=False)
        client = await self._start(pomodoro)

        await _wait_for(lambda: not pomodoro.is_active() and pomodoro.counter.working == 1)
        await client.abort()
        outcome = await asyncio.wait_for(client.wait(), timeout=5.0)

        self.assertEqual("aborted", outcome)
        self.assertEqual(1, pomodoro.counter.working)

    async def test_poisoned_state_propagates_to_wait(self) -> None:
        pomodoro = _pomodoro(continuous=True)
        client = await self._start(pomodoro)

        await _wait_for(lambda: pomodoro.counter.working >= 1)
        with contextlib.suppress(RuntimeError):
            with pomodoro.shared.guard():
                raise RuntimeError("holder failed")

        with self.assertRaises(PoisonedStateError):
            await asyncio.wait_for(client.wait(), timeout=5.0)


if __name__ == "__main__":
    unittest.main()
