"""Scheduler helper that owns the auto-dismiss timers for status banners.

The runtime passes ``loop.call_later``-style schedule and cancel callables
into this class so timer state is tracked in one place and a new banner can
cancel the pending dismissal of the previous one.
"""

from __future__ import annotations


import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


ScheduleFn = Callable[[int, Callable[[], None]], Any]
CancelFn = Callable[[Any], None]


@dataclass
class TimerHandle:
    """Timer token associated with a single channel.

    Attributes:
        channel: Channel key (e.g. ``status``).
        token: Token returned by the schedule function.
    """
    channel: str
    token: Any


def _loop_schedule(delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay_ms / 1000.0, callback)


def _loop_cancel(token: asyncio.TimerHandle) -> None:
    token.cancel()


class DismissScheduler:
    """Manage per-channel one-shot timers; defaults to the running asyncio loop."""

    def __init__(
        self,
        schedule: Optional[ScheduleFn] = None,
        cancel: Optional[CancelFn] = None,
    ) -> None:
        self._schedule = schedule or _loop_schedule
        self._cancel = cancel or _loop_cancel
        self._handles: Dict[str, TimerHandle] = {}
        self._log = logging.getLogger(__name__)

    def schedule(self, channel: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` after ``delay_ms``, replacing any timer on ``channel``."""
        delay = max(1, int(delay_ms))
        self.cancel(channel)

        def _fire() -> None:
            self._handles.pop(channel, None)
            callback()

        token = self._schedule(delay, _fire)
        self._handles[channel] = TimerHandle(channel=channel, token=token)

    def cancel(self, channel: str) -> None:
        handle = self._handles.pop(channel, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception:
            self._log.debug("Cancelling timer on %s failed", channel, exc_info=True)

    def cancel_all(self) -> None:
        for channel in list(self._handles.keys()):
            self.cancel(channel)

    def handle_for(self, channel: str) -> Optional[TimerHandle]:
        return self._handles.get(channel)


__all__ = ["DismissScheduler", "TimerHandle"]
