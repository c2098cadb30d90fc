from __future__ import annotations

import asyncio
from typing import Dict, List

import pytest

from cipherreg.domain import errors
from cipherreg.domain.entities import RecordData
from cipherreg.domain.ports import UseCaseError
from cipherreg.usecases.case_store import CaseStore


def _record(name: str, age: int) -> RecordData:
    return RecordData(
        name=name,
        description="Flu",
        public_value1=age,
        public_value2=0,
        timestamp=1_700_000_000,
        creator="0xabc",
        is_verified=False,
        decrypted_value=0,
    )


class _LedgerStub:
    def __init__(self, records: Dict[str, RecordData], broken: tuple = ()) -> None:
        self.records = dict(records)
        self.broken = set(broken)
        self.fail_listing = False
        self.list_calls = 0
        self.gate: asyncio.Event | None = None

    async def get_all_record_keys(self) -> List[str]:
        self.list_calls += 1
        if self.gate is not None and self.list_calls == 1:
            await self.gate.wait()
        if self.fail_listing:
            raise ConnectionError("gateway unreachable")
        return list(self.records)

    async def get_record_data(self, key) -> RecordData:
        if str(key) in self.broken:
            raise RuntimeError(f"cannot decode {key}")
        return self.records[str(key)]


def test_reload_skips_records_that_fail_to_load() -> None:
    records = {f"case-{i}": _record(f"P{i}", 20 + i) for i in range(1, 6)}
    ledger = _LedgerStub(records, broken=("case-2", "case-4"))
    store = CaseStore(ledger, clock=lambda: 123.0)

    cases = asyncio.run(store.reload())

    assert [str(c.key) for c in cases] == ["case-1", "case-3", "case-5"]
    assert store.snapshot.loaded_at == 123.0


def test_key_listing_failure_keeps_previous_snapshot() -> None:
    ledger = _LedgerStub({"case-1": _record("A", 30), "case-2": _record("B", 40)})
    store = CaseStore(ledger)

    async def scenario():
        await store.reload()
        ledger.fail_listing = True
        await store.reload()

    with pytest.raises(UseCaseError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.code == errors.LOAD_ERROR
    assert excinfo.value.message == "Failed to load data"
    assert len(store.cases) == 2


def test_reload_notifies_subscribers_until_unsubscribed() -> None:
    ledger = _LedgerStub({"case-1": _record("A", 30)})
    store = CaseStore(ledger)
    seen: List[int] = []
    unsubscribe = store.subscribe(lambda snapshot: seen.append(len(snapshot)))

    asyncio.run(store.reload())
    unsubscribe()
    asyncio.run(store.reload())

    assert seen == [1]


def test_reloads_during_a_scan_share_one_follow_up_scan() -> None:
    ledger = _LedgerStub({"case-1": _record("A", 30)})
    store = CaseStore(ledger)

    async def scenario():
        ledger.gate = asyncio.Event()
        first = asyncio.ensure_future(store.reload())
        await asyncio.sleep(0)
        assert store.busy
        second = asyncio.ensure_future(store.reload())
        third = asyncio.ensure_future(store.reload())
        await asyncio.sleep(0)
        ledger.records["case-2"] = _record("B", 40)
        ledger.gate.set()
        return await asyncio.gather(first, second, third)

    first, second, third = asyncio.run(scenario())

    assert ledger.list_calls == 2
    assert second == third
    assert len(second) == 2
    assert not store.busy


def test_case_ids_stay_unique_for_keys_without_numeric_suffix() -> None:
    ledger = _LedgerStub(
        {
            "legacy-a": _record("A", 30),
            "case-1700000000": _record("B", 40),
            "legacy-b": _record("C", 50),
        }
    )
    store = CaseStore(ledger)

    cases = asyncio.run(store.reload())

    ids = {str(c.key): c.id for c in cases}
    assert ids["case-1700000000"] == 1_700_000_000
    assert len(set(ids.values())) == 3
    assert [str(c.key) for c in cases] == ["legacy-a", "case-1700000000", "legacy-b"]
