from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

from ..domain.case_filters import (
    FILTER_ALL,
    RECENT_WINDOW_DAYS,
    compute_stats,
    filter_cases,
    normalize_filter_type,
)
from ..domain.entities import Case, CaseStats

CasesSource = Callable[[], Sequence[Case]]


class CasesVM:
    """Search/filter inputs plus derived list and stats over the current snapshot.

    Nothing is cached: every read recomputes from ``source()``, so the view
    always reflects the snapshot the store holds at that moment.
    """

    def __init__(
        self,
        source: CasesSource,
        *,
        recent_window_days: int = RECENT_WINDOW_DAYS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._source = source
        self._clock = clock
        self.recent_window_days = int(recent_window_days)
        self.search_term: str = ""
        self._filter_type: str = FILTER_ALL

    @property
    def filter_type(self) -> str:
        return self._filter_type

    @filter_type.setter
    def filter_type(self, value: str) -> None:
        self._filter_type = normalize_filter_type(value)

    @property
    def cases(self) -> Sequence[Case]:
        return self._source()

    @property
    def filtered_cases(self) -> List[Case]:
        return filter_cases(self.cases, self.search_term, self._filter_type)

    def stats(self, now_unix: Optional[float] = None) -> CaseStats:
        now = self._clock() if now_unix is None else now_unix
        return compute_stats(self.cases, now, recent_window_days=self.recent_window_days)

    def stat_labels(self, now_unix: Optional[float] = None) -> dict:
        """Header strings: totals, verified ratio and average age to one decimal."""
        stats = self.stats(now_unix)
        return {
            "total": str(stats.total),
            "recent": f"+{stats.recent_count} this week",
            "verified": f"{stats.verified_count}/{stats.total}",
            "average_age": f"{stats.average_age:.1f}",
        }


__all__ = ["CasesVM"]
