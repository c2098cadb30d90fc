from __future__ import annotations

import asyncio

import pytest

from cipherreg.adapters.api_errors import ApiClientError
from cipherreg.adapters.ledger_mock import build_mock_stack


def test_create_then_verify_round_marks_record_verified() -> None:
    ledger, encryption, decryption = build_mock_stack()

    async def scenario():
        encrypted = await encryption.encrypt(ledger.contract_address, ledger.account, 57)
        tx = await ledger.create_record("case-1", "Jane", encrypted.ciphertext, encrypted.proof, 57, 0, "Flu")
        await tx.wait()
        handle = await ledger.get_encrypted_value_handle("case-1")

        async def submit(payload, proof):
            return await ledger.submit_verified_decryption("case-1", payload, proof)

        result = await decryption.verify([handle], ledger.contract_address, submit)
        return handle, result, await ledger.get_record_data("case-1")

    handle, result, record = asyncio.run(scenario())

    assert result.value_for(handle) == 57
    assert record.is_verified is True
    assert record.decrypted_value == 57
    assert len(ledger.submitted) == 2
    assert decryption.rounds == 1


def test_second_verification_reverts_with_already_verified() -> None:
    ledger, _encryption, decryption = build_mock_stack()
    ledger.seed("case-1", name="Jane", age=30, disease_type="Flu", verified=True)

    async def scenario():
        handle = await ledger.get_encrypted_value_handle("case-1")

        async def submit(payload, proof):
            return await ledger.submit_verified_decryption("case-1", payload, proof)

        await decryption.verify([handle], ledger.contract_address, submit)

    with pytest.raises(ApiClientError, match="already verified"):
        asyncio.run(scenario())


def test_rejected_signer_raises_rejection_code() -> None:
    ledger, _encryption, _decryption = build_mock_stack()
    ledger.reject_writes = True

    with pytest.raises(ApiClientError) as excinfo:
        asyncio.run(ledger.create_record("case-1", "Jane", "0xct", "0xpf", 1, 0, "Flu"))

    assert excinfo.value.code == "ACTION_REJECTED"
    assert ledger.submitted == []


def test_unknown_record_is_not_found() -> None:
    ledger, _encryption, _decryption = build_mock_stack()

    with pytest.raises(ApiClientError) as excinfo:
        asyncio.run(ledger.get_record_data("case-404"))

    assert excinfo.value.status == 404
