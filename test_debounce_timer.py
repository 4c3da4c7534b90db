import asyncio

from debounce_timer import DebounceTimer


def test_reschedule_coalesces_into_one_call():
    async def scenario():
        calls = []
        timer = DebounceTimer(asyncio.get_running_loop(), 0.2, lambda: calls.append(1))
        for _ in range(5):
            timer.schedule()
            await asyncio.sleep(0.01)
        assert calls == []
        await asyncio.sleep(0.4)
        return calls, timer.pending

    calls, pending = asyncio.run(scenario())
    assert calls == [1]
    assert pending is False


def test_cancel_prevents_call():
    async def scenario():
        calls = []
        timer = DebounceTimer(asyncio.get_running_loop(), 0.01, lambda: calls.append(1))
        timer.schedule()
        assert timer.cancel() is True
        assert timer.cancel() is False
        await asyncio.sleep(0.03)
        return calls

    assert asyncio.run(scenario()) == []


def test_fire_now_runs_pending_callback_once():
    async def scenario():
        calls = []
        timer = DebounceTimer(asyncio.get_running_loop(), 10, lambda: calls.append(1))
        assert timer.fire_now() is False
        timer.schedule()
        assert timer.fire_now() is True
        await asyncio.sleep(0)
        return calls

    assert asyncio.run(scenario()) == [1]
