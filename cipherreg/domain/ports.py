from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence

from .entities import CaseKey, DecryptionResult, EncryptedInput, RecordData

Address = str
Handle = Any


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = dict(meta or {})


# ---- Ports (Hexagonal boundaries) ----
class PendingTransaction(Protocol):
    """A submitted ledger transaction that has not been confirmed yet."""

    tx_hash: str

    async def wait(self) -> None: ...  # raises TransactionFailedError on revert/timeout


class LedgerPort(Protocol):
    """Read and signed-write access to the case records contract."""

    async def get_all_record_keys(self) -> Sequence[str]: ...
    async def get_record_data(self, key: CaseKey | str) -> RecordData: ...
    async def get_encrypted_value_handle(self, key: CaseKey | str) -> Handle: ...
    async def is_service_available(self) -> bool: ...
    async def get_contract_address(self) -> Address: ...

    async def create_record(
        self,
        key: CaseKey | str,
        name: str,
        ciphertext: Any,
        proof: Any,
        public_value1: int,
        public_value2: int,
        description: str,
    ) -> PendingTransaction: ...
    async def submit_verified_decryption(
        self, key: CaseKey | str, clear_payload: Any, proof: Any
    ) -> PendingTransaction: ...


SubmitFn = Callable[[Any, Any], Awaitable[PendingTransaction]]


class EncryptionPort(Protocol):
    """Turns a plaintext integer into a ciphertext bound to (contract, user)."""

    async def encrypt(
        self, contract_address: Address, user_address: Address, value: int
    ) -> EncryptedInput: ...


class DecryptionPort(Protocol):
    """Verifiable decryption: cleartext plus proof, submitted via ``submit``."""

    async def verify(
        self, handles: Sequence[Handle], contract_address: Address, submit: SubmitFn
    ) -> DecryptionResult: ...


class IdentityPort(Protocol):
    """Wallet/session surface; only the connected account is needed here."""

    def current_account(self) -> Optional[Address]: ...
