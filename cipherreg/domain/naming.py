"""Case key generation and parsing helpers."""

from __future__ import annotations

import threading
import time
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Set

from .entities import Case, CaseKey

CASE_KEY_PREFIX = "case-"

_lock = threading.Lock()
_last_millis = 0


def make_case_key(clock: Optional[Callable[[], float]] = None) -> CaseKey:
    """Return a fresh ``case-<epoch millis>`` key.

    Keys are strictly increasing within the process, so two creations in the
    same millisecond still receive distinct keys.
    """
    global _last_millis
    now = clock() if clock is not None else time.time()
    millis = int(now * 1000)
    with _lock:
        if millis <= _last_millis:
            millis = _last_millis + 1
        _last_millis = millis
    return CaseKey(f"{CASE_KEY_PREFIX}{millis}")


def case_id_from_key(key: CaseKey | str, *, fallback: int = 0) -> int:
    """Derive the numeric case id from its key, using ``fallback`` when not numeric."""
    token = str(key).strip()
    if token.startswith(CASE_KEY_PREFIX):
        token = token[len(CASE_KEY_PREFIX):]
    try:
        value = int(token)
    except ValueError:
        return int(fallback)
    return value if value else int(fallback)


def has_key_id(key: CaseKey | str) -> bool:
    """Return True when the key itself carries a numeric case id."""
    return case_id_from_key(key) != 0


def with_unique_ids(cases: Iterable[Case]) -> List[Case]:
    """Return ``cases`` in order with every ``id`` unique.

    Ids read from keys are claimed first. Fallback ids (record timestamps)
    that clash are bumped to the next free value.
    """
    ordered = list(cases)
    used: Set[int] = set()
    result: List[Optional[Case]] = [None] * len(ordered)
    keyed = [i for i, case in enumerate(ordered) if has_key_id(case.key)]
    fallback = [i for i, case in enumerate(ordered) if not has_key_id(case.key)]
    for index in keyed + fallback:
        case = ordered[index]
        case_id = case.id
        while case_id in used:
            case_id += 1
        used.add(case_id)
        result[index] = case if case_id == case.id else replace(case, id=case_id)
    return [case for case in result if case is not None]


def key_for_case_id(case_id: int) -> CaseKey:
    """Rebuild the ledger key for a case id produced by ``case_id_from_key``."""
    return CaseKey(f"{CASE_KEY_PREFIX}{int(case_id)}")


__all__ = [
    "CASE_KEY_PREFIX",
    "case_id_from_key",
    "has_key_id",
    "key_for_case_id",
    "make_case_key",
    "with_unique_ids",
]
