"""Domain-level error codes shared by use cases and view models.

Codes travel on ``UseCaseError.code`` so view models can branch on them
without inspecting collaborator exceptions.
"""

from __future__ import annotations

UNAUTHENTICATED = "UNAUTHENTICATED"
VALIDATION_ERROR = "VALIDATION_ERROR"
ENCRYPTION_FAILED = "ENCRYPTION_FAILED"
USER_REJECTED = "USER_REJECTED"
SUBMISSION_FAILED = "SUBMISSION_FAILED"
CONFIRMATION_FAILED = "CONFIRMATION_FAILED"
LOAD_ERROR = "LOAD_ERROR"
DECRYPTION_FAILED = "DECRYPTION_FAILED"
OPERATION_BUSY = "OPERATION_BUSY"
INIT_FAILED = "INIT_FAILED"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
AVAILABILITY_CHECK_FAILED = "AVAILABILITY_CHECK_FAILED"

# Free-text markers emitted by wallets and the verification contract.
USER_REJECTED_MARKERS = ("user rejected", "user denied", "action_rejected")
ALREADY_VERIFIED_MARKER = "already verified"


__all__ = [
    "ALREADY_VERIFIED_MARKER",
    "AVAILABILITY_CHECK_FAILED",
    "CONFIRMATION_FAILED",
    "DECRYPTION_FAILED",
    "ENCRYPTION_FAILED",
    "INIT_FAILED",
    "LOAD_ERROR",
    "OPERATION_BUSY",
    "SERVICE_UNAVAILABLE",
    "SUBMISSION_FAILED",
    "UNAUTHENTICATED",
    "USER_REJECTED",
    "USER_REJECTED_MARKERS",
    "VALIDATION_ERROR",
]
