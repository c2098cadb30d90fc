from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

from ..domain.entities import Case
from .status_format import short_address

DecryptFn = Callable[[str], Awaitable[Any]]


class CaseDetailVM:
    """State for the case detail panel, including the local-decrypt overlay.

    The overlay holds a value returned by a decrypt call for a case that was
    not yet verified in the snapshot the panel was opened with. It is never
    written back into the snapshot; a later reload supplies the
    ledger-confirmed value.
    """

    def __init__(self, case: Case, decrypt: DecryptFn) -> None:
        self.case = case
        self._decrypt = decrypt
        self.local_decrypted: Optional[int] = None
        self.decrypting = False

    def refresh(self, case: Case) -> None:
        """Swap in a newer snapshot row for the same key."""
        if str(case.key) != str(self.case.key):
            raise ValueError("CaseDetailVM.refresh expects the same case key.")
        self.case = case

    async def request_decrypt(self) -> Optional[int]:
        """Ask the orchestrator to decrypt; verified cases and in-progress requests are ignored."""
        if self.case.is_verified or self.decrypting:
            return None
        self.decrypting = True
        try:
            result = await self._decrypt(str(self.case.key))
        finally:
            self.decrypting = False
        value = getattr(result, "value", None)
        if getattr(result, "ok", False) and value is not None:
            self.local_decrypted = int(value)
        return self.local_decrypted

    @property
    def age_text(self) -> str:
        if self.case.is_verified:
            return f"{self.case.decrypted_value} (On-chain Verified)"
        if self.local_decrypted is not None:
            return f"{self.local_decrypted} (Locally Decrypted)"
        return "Encrypted"

    @property
    def can_decrypt(self) -> bool:
        return not self.case.is_verified and not self.decrypting

    @property
    def creator_label(self) -> str:
        return short_address(self.case.creator_address)


__all__ = ["CaseDetailVM"]
