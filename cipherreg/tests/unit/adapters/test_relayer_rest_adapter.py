from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

import pytest

from cipherreg.adapters.api_errors import ApiError
from cipherreg.adapters.relayer_rest import RelayerRestAdapter


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)

    def json(self) -> Any:
        return self._payload


class _PostSession:
    def __init__(self, *responses: _ResponseStub) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def post(self, url, *, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "body": json.loads(data) if data else None})
        return self._responses.pop(0)


class _Tx:
    tx_hash = "0xtx9"

    def __init__(self) -> None:
        self.waited = False

    async def wait(self) -> None:
        self.waited = True


def _adapter(*responses: _ResponseStub) -> tuple[RelayerRestAdapter, _PostSession]:
    adapter = RelayerRestAdapter("http://relayer.test")
    session = _PostSession(*responses)
    adapter.http.session = session  # type: ignore[assignment]
    return adapter, session


def test_encrypt_posts_value_for_contract_and_user() -> None:
    adapter, session = _adapter(_ResponseStub({"ciphertext": "0xct", "proof": "0xpf"}))

    encrypted = asyncio.run(adapter.encrypt("0xcontract", "0xuser", 42))

    assert encrypted.ciphertext == "0xct"
    assert encrypted.proof == "0xpf"
    assert session.calls[0]["url"] == "http://relayer.test/encrypt"
    assert session.calls[0]["body"] == {"contract": "0xcontract", "user": "0xuser", "value": 42}


def test_verify_submits_proof_and_waits_before_returning_values() -> None:
    adapter, session = _adapter(
        _ResponseStub(
            {
                "clearValues": {"0xh1": "42"},
                "abiEncodedClearValues": "0xencoded",
                "decryptionProof": "0xproof",
            }
        )
    )
    submitted: List[tuple] = []
    tx = _Tx()

    async def submit(payload, proof):
        submitted.append((payload, proof))
        return tx

    result = asyncio.run(adapter.verify(["0xh1"], "0xcontract", submit))

    assert submitted == [("0xencoded", "0xproof")]
    assert tx.waited is True
    assert result.value_for("0xh1") == 42
    assert session.calls[0]["body"]["handles"] == ["0xh1"]


def test_verify_without_proof_material_does_not_submit() -> None:
    adapter, _session = _adapter(_ResponseStub({"clearValues": {"0xh1": 1}}))

    async def submit(payload, proof):  # pragma: no cover - must not be called
        raise AssertionError("submit called")

    with pytest.raises(ApiError):
        asyncio.run(adapter.verify(["0xh1"], "0xcontract", submit))


def test_verify_accepts_hex_clear_values() -> None:
    adapter, _session = _adapter(
        _ResponseStub(
            {
                "clearValues": {"0xh1": "0x2a", "0xh2": 7},
                "abiEncodedClearValues": "0xencoded",
                "decryptionProof": "0xproof",
            }
        )
    )

    async def submit(payload, proof):
        return _Tx()

    result = asyncio.run(adapter.verify(["0xh1", "0xh2"], "0xcontract", submit))

    assert result.value_for("0xh1") == 42
    assert result.value_for("0xh2") == 7


def test_verify_rejects_unparsable_clear_value_before_submitting() -> None:
    adapter, _session = _adapter(
        _ResponseStub(
            {
                "clearValues": {"0xh1": "forty-two"},
                "abiEncodedClearValues": "0xencoded",
                "decryptionProof": "0xproof",
            }
        )
    )
    submitted: List[tuple] = []

    async def submit(payload, proof):
        submitted.append((payload, proof))
        return _Tx()

    with pytest.raises(ApiError):
        asyncio.run(adapter.verify(["0xh1"], "0xcontract", submit))
    assert submitted == []


def test_initialize_marks_ready() -> None:
    adapter, _session = _adapter(_ResponseStub({"ready": True}))

    asyncio.run(adapter.initialize())

    assert adapter.ready is True
