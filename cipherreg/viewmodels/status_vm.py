from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from .status_format import PHASE_ERROR, PHASE_IDLE, PHASE_PENDING, PHASE_SUCCESS

SUCCESS_DISMISS_MS = 2000
ERROR_DISMISS_MS = 3000
_CHANNEL = "status"


class TimerScheduler(Protocol):
    """Shape of ``cipherreg.app.dismiss_scheduler.DismissScheduler``."""

    def schedule(self, channel: str, delay_ms: int, callback: Callable[[], None]) -> Any: ...
    def cancel(self, channel: str) -> None: ...


@dataclass(frozen=True)
class OperationStatus:
    """Banner state shown while an operation runs or just finished."""

    phase: str = PHASE_IDLE
    message: str = ""
    visible: bool = False


IDLE = OperationStatus()


class StatusVM:
    """Single-writer owner of the status banner and its auto-dismiss timer.

    Every new status cancels the pending dismissal of the previous one so a
    stale timer never clears a newer message. Pending banners stay until
    replaced.
    """

    def __init__(
        self,
        scheduler: TimerScheduler,
        *,
        success_dismiss_ms: int = SUCCESS_DISMISS_MS,
        error_dismiss_ms: int = ERROR_DISMISS_MS,
        on_change: Optional[Callable[[OperationStatus], None]] = None,
    ) -> None:
        self.scheduler = scheduler
        self.success_dismiss_ms = int(success_dismiss_ms)
        self.error_dismiss_ms = int(error_dismiss_ms)
        self.on_change = on_change
        self._status = IDLE

    @property
    def status(self) -> OperationStatus:
        return self._status

    def set_pending(self, message: str) -> None:
        self._apply(OperationStatus(PHASE_PENDING, message, True), None)

    def set_success(self, message: str) -> None:
        self._apply(OperationStatus(PHASE_SUCCESS, message, True), self.success_dismiss_ms)

    def set_error(self, message: str) -> None:
        self._apply(OperationStatus(PHASE_ERROR, message, True), self.error_dismiss_ms)

    def clear(self) -> None:
        self.scheduler.cancel(_CHANNEL)
        self._set(IDLE)

    def _apply(self, status: OperationStatus, dismiss_ms: Optional[int]) -> None:
        self.scheduler.cancel(_CHANNEL)
        self._set(status)
        if dismiss_ms is not None:
            self.scheduler.schedule(_CHANNEL, dismiss_ms, self._dismiss)

    def _dismiss(self) -> None:
        self._set(IDLE)

    def _set(self, status: OperationStatus) -> None:
        self._status = status
        if self.on_change:
            self.on_change(status)


__all__ = ["ERROR_DISMISS_MS", "IDLE", "OperationStatus", "StatusVM", "SUCCESS_DISMISS_MS"]
