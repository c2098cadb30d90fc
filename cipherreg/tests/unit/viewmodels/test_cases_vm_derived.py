from __future__ import annotations

from typing import List

import pytest

from cipherreg.domain.entities import Case, CaseKey
from cipherreg.viewmodels.cases_vm import CasesVM

NOW = 1_700_000_000


def _case(key: str, name: str, age: int, disease: str, verified: bool = False, created: int = NOW) -> Case:
    return Case(
        key=CaseKey(key),
        id=1,
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


def test_filtered_cases_follow_source_changes() -> None:
    snapshot: List[Case] = [_case("case-1", "Ann", 30, "Ovarian cyst", verified=True)]
    vm = CasesVM(lambda: snapshot)
    vm.search_term = "CYST"
    vm.filter_type = "verified"

    assert [c.name for c in vm.filtered_cases] == ["Ann"]

    snapshot.append(_case("case-2", "Bea", 40, "Cyst", verified=True))
    assert [c.name for c in vm.filtered_cases] == ["Ann", "Bea"]


def test_filter_type_setter_validates() -> None:
    vm = CasesVM(lambda: [])

    with pytest.raises(ValueError):
        vm.filter_type = "archived"
    assert vm.filter_type == "all"


def test_stat_labels_use_clock() -> None:
    cases = [
        _case("case-1", "Ann", 10, "Flu", verified=True),
        _case("case-2", "Bea", 30, "Flu", created=NOW - 30 * 86400),
    ]
    vm = CasesVM(lambda: cases, clock=lambda: NOW)

    assert vm.stat_labels() == {
        "total": "2",
        "recent": "+1 this week",
        "verified": "1/2",
        "average_age": "20.0",
    }
