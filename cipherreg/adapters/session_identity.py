from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cipherreg.domain.ports import IdentityPort


@dataclass
class SessionIdentity(IdentityPort):
    """Holds the account of the connected wallet session, ``None`` when disconnected."""

    account: Optional[str] = None

    def connect(self, account: str) -> None:
        account = (account or "").strip()
        if not account:
            raise ValueError("Account address must be non-empty.")
        self.account = account

    def current_account(self) -> Optional[str]:
        return self.account
