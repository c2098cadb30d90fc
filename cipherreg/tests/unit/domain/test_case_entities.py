from __future__ import annotations

import pytest

from cipherreg.domain.entities import Case, CaseKey, CaseSnapshot, DecryptionResult, RecordData


def _record(**overrides) -> RecordData:
    payload = {
        "name": "Jane Doe",
        "description": "Influenza",
        "publicValue1": 42,
        "publicValue2": 0,
        "timestamp": 1_700_000_000,
        "creator": "0xabc",
        "isVerified": False,
        "decryptedValue": 0,
    }
    payload.update(overrides)
    return RecordData.from_mapping(payload)


def test_case_key_rejects_blank_values() -> None:
    with pytest.raises(ValueError):
        CaseKey("  ")


def test_record_from_mapping_accepts_snake_case_and_hex() -> None:
    record = RecordData.from_mapping(
        {
            "name": "Jane",
            "description": "Flu",
            "public_value1": "0x2a",
            "public_value2": "7",
            "timestamp": "1700000000",
            "creator": "0xabc",
            "is_verified": "true",
            "decrypted_value": 42,
        }
    )

    assert record.public_value1 == 42
    assert record.public_value2 == 7
    assert record.timestamp == 1_700_000_000
    assert record.is_verified is True


def test_record_from_mapping_requires_name() -> None:
    with pytest.raises(ValueError):
        RecordData.from_mapping({"description": "Flu"})


def test_case_from_record_derives_id_from_key() -> None:
    case = Case.from_record("case-1700000000123", _record())

    assert case.key == CaseKey("case-1700000000123")
    assert case.id == 1_700_000_000_123
    assert case.age_years == 42
    assert case.disease_type == "Influenza"
    assert case.verified_value is None


def test_case_from_record_falls_back_to_timestamp_for_foreign_keys() -> None:
    case = Case.from_record("legacy-key", _record(timestamp=1_650_000_000))

    assert case.id == 1_650_000_000


def test_verified_value_only_when_verified() -> None:
    case = Case.from_record("case-1", _record(isVerified=True, decryptedValue=42))

    assert case.verified_value == 42


def test_snapshot_find_and_len() -> None:
    first = Case.from_record("case-1", _record(name="A"))
    second = Case.from_record("case-2", _record(name="B"))
    snapshot = CaseSnapshot(cases=(first, second), loaded_at=10.0)

    assert len(snapshot) == 2
    assert snapshot.find("case-2") is second
    assert snapshot.find(CaseKey("case-3")) is None


def test_decryption_result_value_for_missing_handle() -> None:
    result = DecryptionResult(clear_values={"0x01": "17"})

    assert result.value_for("0x01") == 17
    assert result.value_for("0x02") is None
