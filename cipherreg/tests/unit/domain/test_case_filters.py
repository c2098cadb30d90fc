from __future__ import annotations

import pytest

from cipherreg.domain.case_filters import SECONDS_PER_DAY, compute_stats, filter_cases
from cipherreg.domain.entities import Case, CaseKey

NOW = 1_700_000_000


def _case(key: str, name: str, age: int, disease: str, *, verified: bool = False, created: int = NOW) -> Case:
    return Case(
        key=CaseKey(key),
        id=int(key.split("-")[-1]),
        name=name,
        age_years=age,
        disease_type=disease,
        created_at_unix=created,
        creator_address="0xabc",
        public_aux1=age,
        public_aux2=0,
        is_verified=verified,
        decrypted_value=age if verified else 0,
    )


def test_average_age_over_snapshot() -> None:
    cases = [_case("case-1", "A", 10, "Flu"), _case("case-2", "B", 20, "Flu"), _case("case-3", "C", 30, "Flu")]

    stats = compute_stats(cases, NOW)

    assert stats.total == 3
    assert stats.average_age == 20.0


def test_stats_for_empty_snapshot() -> None:
    stats = compute_stats([], NOW)

    assert stats.total == 0
    assert stats.verified_count == 0
    assert stats.average_age == 0
    assert stats.recent_count == 0


def test_recent_count_uses_strict_window() -> None:
    window = 7 * SECONDS_PER_DAY
    cases = [
        _case("case-1", "A", 10, "Flu", created=NOW - window + 1),
        _case("case-2", "B", 20, "Flu", created=NOW - window),
    ]

    assert compute_stats(cases, NOW).recent_count == 1


def test_verified_filter_combined_with_disease_search() -> None:
    cases = [
        _case("case-1", "Ann", 30, "Ovarian cyst", verified=True),
        _case("case-2", "Ben", 40, "Kidney Cyst"),
        _case("case-3", "Cyd", 50, "Flu", verified=True),
    ]

    result = filter_cases(cases, "cyst", "verified")

    assert [str(c.key) for c in result] == ["case-1"]


def test_search_matches_name_case_insensitively_and_keeps_order() -> None:
    cases = [
        _case("case-1", "Maria", 30, "Flu"),
        _case("case-2", "Ben", 40, "Asthma"),
        _case("case-3", "MARIO", 50, "Flu"),
    ]

    result = filter_cases(cases, "mar", "all")

    assert [c.name for c in result] == ["Maria", "MARIO"]


def test_unverified_filter_with_empty_search() -> None:
    cases = [_case("case-1", "A", 1, "x", verified=True), _case("case-2", "B", 2, "y")]

    assert [c.name for c in filter_cases(cases, "", "unverified")] == ["B"]


def test_unknown_filter_type_raises() -> None:
    with pytest.raises(ValueError):
        filter_cases([], "", "pending")
