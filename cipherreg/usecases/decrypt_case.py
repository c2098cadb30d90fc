from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cipherreg.domain import errors
from cipherreg.domain.entities import CaseKey
from cipherreg.domain.ports import DecryptionPort, LedgerPort, UseCaseError
from cipherreg.usecases.error_mapping import describe_error, is_already_verified

SOURCE_STORED = "stored"
"""Record was already verified; value read from the ledger, no round performed."""
SOURCE_VERIFIED = "verified"
"""A decryption round ran and its proof was accepted by the ledger."""
SOURCE_CONVERGED = "converged"
"""Another party verified the record first; no new value."""

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecryptOutcome:
    key: CaseKey
    name: str
    value: Optional[int]
    source: str

    @property
    def ran_round(self) -> bool:
        return self.source != SOURCE_STORED


@dataclass
class DecryptCase:
    """Use-case reading a record and, if unverified, running one verifiable decryption round."""

    ledger: LedgerPort
    decryption: DecryptionPort

    async def __call__(
        self,
        key: CaseKey | str,
        on_round_started: Optional[Callable[[], None]] = None,
    ) -> DecryptOutcome:
        case_key = key if isinstance(key, CaseKey) else CaseKey(str(key))
        try:
            record = await self.ledger.get_record_data(case_key)
        except Exception as exc:
            raise UseCaseError(
                errors.DECRYPTION_FAILED,
                "Decryption failed",
                meta={"cause": describe_error(exc)},
            ) from exc

        if record.is_verified:
            return DecryptOutcome(case_key, record.name, record.decrypted_value, SOURCE_STORED)

        if on_round_started:
            on_round_started()

        async def submit(clear_payload: Any, proof: Any):
            return await self.ledger.submit_verified_decryption(case_key, clear_payload, proof)

        try:
            handle = await self.ledger.get_encrypted_value_handle(case_key)
            contract = await self.ledger.get_contract_address()
            result = await self.decryption.verify([handle], contract, submit)
        except Exception as exc:
            if is_already_verified(exc):
                LOGGER.info("Record %s was verified concurrently: %s", case_key, exc)
                return DecryptOutcome(case_key, record.name, None, SOURCE_CONVERGED)
            raise UseCaseError(
                errors.DECRYPTION_FAILED,
                "Decryption failed",
                meta={"cause": describe_error(exc)},
            ) from exc

        value = result.value_for(handle)
        if value is None:
            raise UseCaseError(
                errors.DECRYPTION_FAILED,
                "Decryption failed",
                meta={"cause": f"no clear value reported for handle {handle}"},
            )
        LOGGER.info("Record %s decrypted and verified", case_key)
        return DecryptOutcome(case_key, record.name, value, SOURCE_VERIFIED)
