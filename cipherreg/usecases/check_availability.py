from __future__ import annotations
from dataclasses import dataclass

from cipherreg.domain import errors
from cipherreg.domain.ports import LedgerPort, UseCaseError


@dataclass
class CheckAvailability:
    ledger: LedgerPort

    async def __call__(self) -> None:
        try:
            available = await self.ledger.is_service_available()
        except Exception as e:
            raise UseCaseError(errors.AVAILABILITY_CHECK_FAILED, "Availability check failed") from e
        if not available:
            raise UseCaseError(errors.SERVICE_UNAVAILABLE, "Encryption service is not available")
