from __future__ import annotations

import pytest

from cipherreg.viewmodels.activity_log_vm import ActivityLogVM


def test_entries_are_newest_first_and_bounded() -> None:
    vm = ActivityLogVM(limit=10)

    for i in range(12):
        vm.append(f"entry {i}")

    assert len(vm) == 10
    assert vm.entries[0] == "entry 11"
    assert vm.entries[-1] == "entry 2"


def test_on_change_receives_entries() -> None:
    seen = []
    vm = ActivityLogVM(on_change=seen.append)

    vm.append("Data refreshed: 0 cases loaded")

    assert seen == [("Data refreshed: 0 cases loaded",)]


def test_limit_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ActivityLogVM(limit=0)
