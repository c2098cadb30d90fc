"""Status-token normalization and display labeling helpers for view models.

Call context:
    ``StatusVM`` and ``CaseDetailVM`` use these helpers to keep banner phases
    and case verification labels consistent across views.
"""

from __future__ import annotations

from typing import Optional

PHASE_IDLE = "idle"
PHASE_PENDING = "pending"
PHASE_SUCCESS = "success"
PHASE_ERROR = "error"


def verification_label(is_verified: bool) -> str:
    return "Verified" if is_verified else "Encrypted"


def short_address(address: Optional[str]) -> str:
    """Abbreviate ``0x1234...abcd`` style account addresses for display."""
    text = (address or "").strip()
    if len(text) <= 12:
        return text
    return f"{text[:6]}...{text[-4:]}"


__all__ = [
    "PHASE_ERROR",
    "PHASE_IDLE",
    "PHASE_PENDING",
    "PHASE_SUCCESS",
    "short_address",
    "verification_label",
]
