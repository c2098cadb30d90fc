from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from cipherreg.domain import errors
from cipherreg.domain.entities import CaseKey
from cipherreg.domain.naming import make_case_key
from cipherreg.domain.ports import EncryptionPort, LedgerPort, UseCaseError
from cipherreg.usecases.error_mapping import describe_error, map_submission_error

PHASE_ENCRYPTING = "encrypting"
PHASE_SUBMITTING = "submitting"

ProgressFn = Callable[[str], None]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateCaseRequest:
    """Raw form input for a new case."""

    name: str
    age: str
    disease_type: str


@dataclass(frozen=True)
class ValidatedCase:
    name: str
    age: int
    disease_type: str


def validate_request(request: CreateCaseRequest) -> ValidatedCase:
    """Trim and check form input before any remote call.

    Raises:
        UseCaseError: ``VALIDATION_ERROR`` for empty fields or a bad age.
    """
    name = (request.name or "").strip()
    disease = (request.disease_type or "").strip()
    age_text = str(request.age if request.age is not None else "").strip()
    missing = [
        label
        for label, value in (("name", name), ("age", age_text), ("disease type", disease))
        if not value
    ]
    if missing:
        raise UseCaseError(
            errors.VALIDATION_ERROR,
            f"Please fill in: {', '.join(missing)}",
            meta={"missing": missing},
        )
    try:
        age = int(age_text)
    except ValueError:
        raise UseCaseError(errors.VALIDATION_ERROR, "Age must be a whole number") from None
    if age < 0:
        raise UseCaseError(errors.VALIDATION_ERROR, "Age must not be negative")
    return ValidatedCase(name=name, age=age, disease_type=disease)


@dataclass
class CreateCase:
    """Use-case encrypting the age, submitting the record and awaiting confirmation."""

    ledger: LedgerPort
    encryption: EncryptionPort
    key_factory: Callable[[], CaseKey] = make_case_key

    async def __call__(
        self,
        request: CreateCaseRequest,
        account: str,
        on_progress: Optional[ProgressFn] = None,
    ) -> CaseKey:
        progress = on_progress or (lambda _phase: None)
        case = validate_request(request)

        progress(PHASE_ENCRYPTING)
        try:
            contract = await self.ledger.get_contract_address()
            encrypted = await self.encryption.encrypt(contract, account, case.age)
        except Exception as exc:
            LOGGER.warning("Encrypting age for %s failed: %s", case.name, exc)
            raise UseCaseError(
                errors.ENCRYPTION_FAILED,
                f"Encryption failed: {describe_error(exc)}",
            ) from exc

        key = self.key_factory()
        progress(PHASE_SUBMITTING)
        try:
            tx = await self.ledger.create_record(
                key,
                case.name,
                encrypted.ciphertext,
                encrypted.proof,
                case.age,
                0,
                case.disease_type,
            )
            await tx.wait()
        except Exception as exc:
            mapped = map_submission_error(exc, prefix="Creation failed")
            LOGGER.warning("Creating %s failed (%s): %s", key, mapped.code, exc)
            raise mapped from exc

        LOGGER.info("Case %s confirmed on ledger", key)
        return key
