from __future__ import annotations

import asyncio
from typing import Any, Callable, List

from cipherreg.app.dismiss_scheduler import DismissScheduler


class _FakeTimers:
    def __init__(self) -> None:
        self.scheduled: List[tuple[int, Callable[[], None]]] = []
        self.cancelled: List[Any] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        self.scheduled.append((delay_ms, callback))
        return len(self.scheduled)

    def cancel(self, token: Any) -> None:
        self.cancelled.append(token)


def test_schedule_replaces_existing_timer_on_channel() -> None:
    timers = _FakeTimers()
    scheduler = DismissScheduler(timers.schedule, timers.cancel)

    scheduler.schedule("status", 2000, lambda: None)
    scheduler.schedule("status", 3000, lambda: None)

    assert timers.cancelled == [1]
    handle = scheduler.handle_for("status")
    assert handle is not None and handle.token == 2


def test_fired_timer_forgets_its_handle() -> None:
    timers = _FakeTimers()
    scheduler = DismissScheduler(timers.schedule, timers.cancel)
    fired: List[bool] = []

    scheduler.schedule("status", 0, lambda: fired.append(True))
    delay, callback = timers.scheduled[0]
    callback()

    assert delay == 1
    assert fired == [True]
    assert scheduler.handle_for("status") is None


def test_cancel_failures_are_not_raised() -> None:
    def broken_cancel(token: Any) -> None:
        raise RuntimeError("already fired")

    scheduler = DismissScheduler(lambda delay, cb: object(), broken_cancel)
    scheduler.schedule("a", 10, lambda: None)
    scheduler.schedule("b", 10, lambda: None)

    scheduler.cancel_all()

    assert scheduler.handle_for("a") is None
    assert scheduler.handle_for("b") is None


def test_default_uses_running_loop_call_later() -> None:
    fired: List[str] = []

    async def scenario():
        scheduler = DismissScheduler()
        scheduler.schedule("status", 5, lambda: fired.append("first"))
        scheduler.schedule("other", 5, lambda: fired.append("other"))
        scheduler.cancel("other")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert fired == ["first"]
