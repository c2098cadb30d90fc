from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from cipherreg.adapters.api_errors import ApiClientError, TransactionFailedError
from cipherreg.domain.entities import CaseKey, DecryptionResult, EncryptedInput, RecordData
from cipherreg.domain.ports import (
    DecryptionPort,
    EncryptionPort,
    LedgerPort,
    SubmitFn,
)

MOCK_CONTRACT_ADDRESS = "0x00000000000000000000000000000000000c4a5e"


@dataclass
class MockFheBackend:
    """Shared plaintext registry standing in for the encryption key holder."""

    _plaintexts: Dict[str, int] = field(default_factory=dict)
    _counter: Any = field(default_factory=lambda: itertools.count(1))

    def seal(self, value: int, contract: str, user: str) -> str:
        handle = f"0xhandle{next(self._counter):04d}"
        self._plaintexts[handle] = int(value)
        return handle

    def reveal(self, handle: str) -> int:
        if handle not in self._plaintexts:
            raise KeyError(f"Unknown ciphertext handle {handle}")
        return self._plaintexts[handle]


@dataclass
class MockPendingTransaction:
    tx_hash: str
    error: Optional[str] = None

    async def wait(self) -> None:
        if self.error:
            raise TransactionFailedError(self.error, tx_hash=self.tx_hash)


@dataclass
class LedgerMock(LedgerPort):
    """Offline substitute for ``LedgerRestAdapter`` with deterministic behavior."""

    backend: MockFheBackend = field(default_factory=MockFheBackend)
    account: str = "0x0000000000000000000000000000000000000001"
    available: bool = True
    contract_address: str = MOCK_CONTRACT_ADDRESS
    reject_writes: bool = False
    clock: Any = time.time

    def __post_init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._tx_counter = itertools.count(1)
        self.submitted: List[str] = []

    # ---------- read path ----------

    async def get_all_record_keys(self) -> List[str]:
        return list(self._records.keys())

    async def get_record_data(self, key: CaseKey | str) -> RecordData:
        row = self._row(key)
        return RecordData(
            name=row["name"],
            description=row["description"],
            public_value1=row["publicValue1"],
            public_value2=row["publicValue2"],
            timestamp=row["timestamp"],
            creator=row["creator"],
            is_verified=row["isVerified"],
            decrypted_value=row["decryptedValue"],
        )

    async def get_encrypted_value_handle(self, key: CaseKey | str) -> str:
        return self._row(key)["handle"]

    async def is_service_available(self) -> bool:
        return self.available

    async def get_contract_address(self) -> str:
        return self.contract_address

    # ---------- signed-write path ----------

    async def create_record(
        self,
        key: CaseKey | str,
        name: str,
        ciphertext: Any,
        proof: Any,
        public_value1: int,
        public_value2: int,
        description: str,
    ) -> MockPendingTransaction:
        self._check_signer()
        token = str(key)
        if token in self._records:
            raise ApiClientError(f"Record {token} already exists", status=409, code="DUPLICATE_KEY")
        self._records[token] = {
            "name": name,
            "description": description,
            "publicValue1": int(public_value1),
            "publicValue2": int(public_value2),
            "timestamp": int(self.clock()),
            "creator": self.account,
            "isVerified": False,
            "decryptedValue": 0,
            "handle": str(ciphertext),
        }
        return self._tx()

    async def submit_verified_decryption(
        self, key: CaseKey | str, clear_payload: Any, proof: Any
    ) -> MockPendingTransaction:
        self._check_signer()
        row = self._row(key)
        if row["isVerified"]:
            raise ApiClientError("execution reverted: Data already verified", status=400)
        if proof != _proof_for(clear_payload):
            raise ApiClientError("execution reverted: Invalid decryption proof", status=400)
        row["isVerified"] = True
        row["decryptedValue"] = int(clear_payload[row["handle"]])
        return self._tx()

    # ---------- helpers ----------

    def seed(self, key: str, *, name: str, age: int, disease_type: str, timestamp: Optional[int] = None,
             verified: bool = False) -> None:
        """Insert a record directly, bypassing signer checks (fixtures and demos)."""
        handle = self.backend.seal(age, self.contract_address, self.account)
        self._records[key] = {
            "name": name,
            "description": disease_type,
            "publicValue1": int(age),
            "publicValue2": 0,
            "timestamp": int(self.clock() if timestamp is None else timestamp),
            "creator": self.account,
            "isVerified": verified,
            "decryptedValue": int(age) if verified else 0,
            "handle": handle,
        }

    def _row(self, key: CaseKey | str) -> Dict[str, Any]:
        token = str(key)
        if token not in self._records:
            raise ApiClientError(f"Record {token} not found", status=404)
        return self._records[token]

    def _check_signer(self) -> None:
        if self.reject_writes:
            raise ApiClientError(
                "user rejected transaction", status=400, code="ACTION_REJECTED"
            )

    def _tx(self) -> MockPendingTransaction:
        tx_hash = f"0xtx{next(self._tx_counter):06d}"
        self.submitted.append(tx_hash)
        return MockPendingTransaction(tx_hash=tx_hash)


@dataclass
class EncryptionMock(EncryptionPort):
    backend: MockFheBackend
    ready: bool = False

    async def initialize(self) -> None:
        self.ready = True

    async def encrypt(self, contract_address: str, user_address: str, value: int) -> EncryptedInput:
        handle = self.backend.seal(value, contract_address, user_address)
        return EncryptedInput(ciphertext=handle, proof=f"inputproof:{handle}")


@dataclass
class DecryptionMock(DecryptionPort):
    backend: MockFheBackend
    rounds: int = 0

    async def verify(
        self, handles: Sequence[str], contract_address: str, submit: SubmitFn
    ) -> DecryptionResult:
        self.rounds += 1
        clear = {handle: self.backend.reveal(handle) for handle in handles}
        tx = await submit(clear, _proof_for(clear))
        await tx.wait()
        return DecryptionResult(clear_values=clear)


def _proof_for(clear: Any) -> str:
    if not isinstance(clear, dict):
        return ""
    return "kms:" + ",".join(f"{h}={v}" for h, v in sorted(clear.items()))


def build_mock_stack(account: str = "0x0000000000000000000000000000000000000001"):
    """Return ``(ledger, encryption, decryption)`` sharing one mock backend."""
    backend = MockFheBackend()
    ledger = LedgerMock(backend=backend, account=account)
    return ledger, EncryptionMock(backend), DecryptionMock(backend)


__all__ = [
    "DecryptionMock",
    "EncryptionMock",
    "LedgerMock",
    "MOCK_CONTRACT_ADDRESS",
    "MockFheBackend",
    "MockPendingTransaction",
    "build_mock_stack",
]
