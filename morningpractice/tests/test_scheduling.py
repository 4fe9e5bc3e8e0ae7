"""Tests for the scheduler implementations."""

import asyncio
import threading

import pytest

from morningpractice.engine.scheduling import AsyncioScheduler, ManualScheduler


class TestManualScheduler:

    def test_callbacks_run_in_deadline_order(self):
        s = ManualScheduler()
        calls = []
        s.call_later(2.0, lambda: calls.append("b"))
        s.call_later(1.0, lambda: calls.append("a"))
        s.call_later(2.0, lambda: calls.append("c"))
        s.advance(1.5)
        assert calls == ["a"]
        s.advance(0.5)
        assert calls == ["a", "b", "c"]
        assert s.time() == pytest.approx(2.0)

    def test_cancelled_callback_does_not_run(self):
        s = ManualScheduler()
        calls = []
        handle = s.call_later(1.0, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()
        s.advance(5)
        assert calls == []
        assert s.pending_count() == 0

    def test_nested_scheduling_within_one_advance(self):
        s = ManualScheduler()
        times = []

        def again():
            times.append(s.time())
            if len(times) < 3:
                s.call_later(1.0, again)

        s.call_later(1.0, again)
        s.advance(10)
        assert times == [1.0, 2.0, 3.0]

    def test_threadsafe_posts_run_on_advance(self):
        s = ManualScheduler()
        calls = []
        t = threading.Thread(target=lambda: s.call_soon_threadsafe(lambda: calls.append("x")))
        t.start()
        t.join()
        assert calls == []
        assert s.run_pending() == 1
        assert calls == ["x"]

    def test_negative_advance_rejected(self):
        with pytest.raises(ValueError):
            ManualScheduler().advance(-1)


class TestAsyncioScheduler:

    def test_time_scale_must_be_positive(self):
        loop = asyncio.new_event_loop()
        try:
            with pytest.raises(ValueError):
                AsyncioScheduler(loop, time_scale=0)
        finally:
            loop.close()

    @pytest.mark.asyncio
    async def test_call_later_and_threadsafe(self):
        s = AsyncioScheduler(time_scale=100.0)
        fired = asyncio.Event()
        order = []
        s.call_later(1.0, lambda: (order.append("later"), fired.set()))
        threading.Thread(target=lambda: s.call_soon_threadsafe(lambda: order.append("soon"))).start()
        await asyncio.wait_for(fired.wait(), timeout=2.0)
        assert "later" in order and "soon" in order

    @pytest.mark.asyncio
    async def test_cancel(self):
        s = AsyncioScheduler(time_scale=100.0)
        calls = []
        s.call_later(0.5, lambda: calls.append(1)).cancel()
        await asyncio.sleep(0.05)
        assert calls == []
