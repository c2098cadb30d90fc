"""Domain package exports for value objects and aggregates."""

from .case_filters import compute_stats, filter_cases
from .entities import (
    Case,
    CaseKey,
    CaseSnapshot,
    CaseStats,
    DecryptionResult,
    EncryptedInput,
    RecordData,
)
from .naming import case_id_from_key, make_case_key

__all__ = [
    "Case",
    "CaseKey",
    "CaseSnapshot",
    "CaseStats",
    "DecryptionResult",
    "EncryptedInput",
    "RecordData",
    "case_id_from_key",
    "compute_stats",
    "filter_cases",
    "make_case_key",
]
