from __future__ import annotations

from typing import Callable, Optional, Tuple

HISTORY_LIMIT = 10


class ActivityLogVM:
    """Bounded recent-activity journal, newest entry first."""

    def __init__(
        self,
        limit: int = HISTORY_LIMIT,
        on_change: Optional[Callable[[Tuple[str, ...]], None]] = None,
    ) -> None:
        if int(limit) < 1:
            raise ValueError("Activity log limit must be at least 1.")
        self.limit = int(limit)
        self.on_change = on_change
        self._entries: Tuple[str, ...] = ()

    @property
    def entries(self) -> Tuple[str, ...]:
        return self._entries

    def append(self, text: str) -> None:
        self._entries = ((str(text),) + self._entries)[: self.limit]
        if self.on_change:
            self.on_change(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ActivityLogVM", "HISTORY_LIMIT"]
