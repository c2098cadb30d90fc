"""Pure filtering and aggregate helpers over a case snapshot."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .entities import Case, CaseStats

FILTER_ALL = "all"
FILTER_VERIFIED = "verified"
FILTER_UNVERIFIED = "unverified"
FILTER_TYPES = (FILTER_ALL, FILTER_VERIFIED, FILTER_UNVERIFIED)

SECONDS_PER_DAY = 60 * 60 * 24
RECENT_WINDOW_DAYS = 7


def normalize_filter_type(value: str | None) -> str:
    key = (value or "").strip().lower()
    if key not in FILTER_TYPES:
        raise ValueError(f"Unknown filter type '{value}'. Expected one of {FILTER_TYPES}.")
    return key


def matches_search(case: Case, search_term: str | None) -> bool:
    """Case-insensitive substring match against name or disease type."""
    needle = (search_term or "").lower()
    if not needle:
        return True
    return needle in case.name.lower() or needle in case.disease_type.lower()


def matches_filter(case: Case, filter_type: str) -> bool:
    if filter_type == FILTER_VERIFIED:
        return case.is_verified
    if filter_type == FILTER_UNVERIFIED:
        return not case.is_verified
    return True


def filter_cases(
    cases: Iterable[Case], search_term: str | None = "", filter_type: str = FILTER_ALL
) -> List[Case]:
    """Return cases matching both the search term and the verification filter.

    Snapshot order is preserved.
    """
    key = normalize_filter_type(filter_type)
    return [
        case
        for case in cases
        if matches_search(case, search_term) and matches_filter(case, key)
    ]


def compute_stats(
    cases: Sequence[Case],
    now_unix: float,
    *,
    recent_window_days: int = RECENT_WINDOW_DAYS,
) -> CaseStats:
    """Aggregate totals, verified count, mean age and cases created in the recent window."""
    total = len(cases)
    verified = sum(1 for case in cases if case.is_verified)
    average = (sum(case.age_years for case in cases) / total) if total else 0.0
    window_s = recent_window_days * SECONDS_PER_DAY
    recent = sum(1 for case in cases if now_unix - case.created_at_unix < window_s)
    return CaseStats(
        total=total,
        verified_count=verified,
        average_age=float(average),
        recent_count=recent,
    )


__all__ = [
    "FILTER_ALL",
    "FILTER_TYPES",
    "FILTER_UNVERIFIED",
    "FILTER_VERIFIED",
    "RECENT_WINDOW_DAYS",
    "compute_stats",
    "filter_cases",
    "matches_filter",
    "matches_search",
    "normalize_filter_type",
]
