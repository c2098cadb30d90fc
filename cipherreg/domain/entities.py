"""Domain value objects and aggregates shared across adapters, use-cases, and view models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class CaseKey:
    """Ledger-assigned string key addressing a single case record."""

    value: str
    """Key string as stored on the ledger, typically ``case-<epoch millis>``."""

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("CaseKey must be a non-empty string.")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RecordData:
    """Raw record payload returned by the ledger for one key."""

    name: str
    description: str
    public_value1: int
    public_value2: int
    timestamp: int
    creator: str
    is_verified: bool
    decrypted_value: int

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "RecordData":
        """Build a record from a loosely typed mapping (gateway JSON or mock rows)."""
        if not isinstance(payload, Mapping):
            raise TypeError("RecordData payload must be a mapping.")
        name = payload.get("name")
        if not isinstance(name, str):
            raise ValueError("RecordData requires a string 'name'.")
        return cls(
            name=name,
            description=str(payload.get("description") or ""),
            public_value1=_as_int(payload.get("publicValue1", payload.get("public_value1"))),
            public_value2=_as_int(payload.get("publicValue2", payload.get("public_value2"))),
            timestamp=_as_int(payload.get("timestamp")),
            creator=str(payload.get("creator") or ""),
            is_verified=_as_bool(payload.get("isVerified", payload.get("is_verified"))),
            decrypted_value=_as_int(payload.get("decryptedValue", payload.get("decrypted_value"))),
        )


@dataclass(frozen=True)
class Case:
    """A registered case as presented to the view layer."""

    key: CaseKey
    """Ledger key the case was registered under."""
    id: int
    """Numeric identifier derived from the key."""
    name: str
    age_years: int
    """Age taken from the public companion value submitted next to the ciphertext."""
    disease_type: str
    created_at_unix: int
    creator_address: str
    public_aux1: int
    public_aux2: int
    is_verified: bool = False
    """True once the ledger has confirmed a verified decryption of the age."""
    decrypted_value: int = 0
    """Ledger-confirmed cleartext; only authoritative when ``is_verified``."""

    @classmethod
    def from_record(cls, key: CaseKey | str, record: RecordData) -> "Case":
        from .naming import case_id_from_key

        case_key = key if isinstance(key, CaseKey) else CaseKey(str(key))
        return cls(
            key=case_key,
            id=case_id_from_key(case_key, fallback=record.timestamp),
            name=record.name,
            age_years=record.public_value1,
            disease_type=record.description,
            created_at_unix=record.timestamp,
            creator_address=record.creator,
            public_aux1=record.public_value1,
            public_aux2=record.public_value2,
            is_verified=record.is_verified,
            decrypted_value=record.decrypted_value,
        )

    @property
    def verified_value(self) -> Optional[int]:
        """Return the cleartext age only when it is ledger-confirmed."""
        return self.decrypted_value if self.is_verified else None


@dataclass(frozen=True)
class CaseSnapshot:
    """Full set of known cases, replaced as a unit after each reload."""

    cases: Tuple[Case, ...] = ()
    loaded_at: Optional[float] = None
    """Unix time the snapshot was built, ``None`` before the first load."""

    def __len__(self) -> int:
        return len(self.cases)

    def find(self, key: CaseKey | str) -> Optional[Case]:
        token = str(key)
        for case in self.cases:
            if str(case.key) == token:
                return case
        return None


@dataclass(frozen=True)
class EncryptedInput:
    """Opaque ciphertext handle and input proof produced by the encryption provider."""

    ciphertext: Any
    proof: Any


@dataclass(frozen=True)
class DecryptionResult:
    """Cleartext values reported by a verifiable decryption round, keyed by handle."""

    clear_values: Mapping[Any, int] = field(default_factory=dict)

    def value_for(self, handle: Any) -> Optional[int]:
        if handle not in self.clear_values:
            return None
        raw = self.clear_values[handle]
        return None if raw is None else int(raw)


@dataclass(frozen=True)
class CaseStats:
    """Aggregate figures shown in the registry header."""

    total: int
    verified_count: int
    average_age: float
    recent_count: int


def _as_int(value: Any) -> int:
    """Coerce ledger numerics (ints, numeric strings, hex strings) to int, 0 when unparsable."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            return 0
    return 0


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)
