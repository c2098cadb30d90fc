"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Iterator, Optional

from cipherreg.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    TransactionFailedError,
)
from cipherreg.domain import errors
from cipherreg.domain.ports import UseCaseError

_REJECTION_CODES = {"ACTION_REJECTED", "USER_REJECTED", "4001"}


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by a port implementation.
        default_code: Code used when ``exc`` has no more specific mapping.
        default_message: Message used instead of ``describe_error(exc)``.

    Returns:
        UseCaseError carrying a user-presentable message.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if is_user_rejection(exc):
        return UseCaseError(errors.USER_REJECTED, "Transaction rejected")
    message = default_message or describe_error(exc)
    meta = {"cause": exc.__class__.__name__}
    if isinstance(exc, TransactionFailedError):
        meta["cause_code"] = exc.code or errors.CONFIRMATION_FAILED
    return UseCaseError(default_code, message, meta=meta)


def map_submission_error(exc: Exception, *, prefix: str) -> UseCaseError:
    """Map a failed signed write (submission or confirmation) for ``create``."""
    if isinstance(exc, UseCaseError) or is_user_rejection(exc):
        return map_api_error(exc, default_code=errors.SUBMISSION_FAILED)
    return map_api_error(
        exc,
        default_code=errors.SUBMISSION_FAILED,
        default_message=_compose_error_message(prefix, describe_error(exc)),
    )


def describe_error(exc: BaseException) -> str:
    """Short, user-facing cause text for an adapter exception."""
    if isinstance(exc, ApiTimeoutError):
        return "Request timed out. Check connection."
    if isinstance(exc, ApiServerError):
        return "Gateway error, try again."
    if isinstance(exc, ApiClientError) and exc.hint:
        return _compose_error_message(str(exc), exc.hint).rstrip(".")
    text = str(exc).strip()
    return text or exc.__class__.__name__


def is_user_rejection(exc: BaseException) -> bool:
    """True when a wallet/signer declined the request.

    Checks the tagged code first; wallets that only expose free text are
    matched on ``errors.USER_REJECTED_MARKERS``.
    """
    for item in _chain(exc):
        code = getattr(item, "code", None)
        if code is not None and str(code).upper() in _REJECTION_CODES:
            return True
        text = _error_text(item)
        if any(marker in text for marker in errors.USER_REJECTED_MARKERS):
            return True
    return False


def is_already_verified(exc: BaseException) -> bool:
    """True when the ledger refused a decryption proof because the record is already verified.

    The contract only reports this as revert text, so the match is on
    ``errors.ALREADY_VERIFIED_MARKER``.
    """
    return any(errors.ALREADY_VERIFIED_MARKER in _error_text(item) for item in _chain(exc))


def _chain(exc: BaseException) -> Iterator[BaseException]:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _error_text(exc: BaseException) -> str:
    parts = [str(exc)]
    if isinstance(exc, ApiError):
        if exc.hint:
            parts.append(exc.hint)
        if isinstance(exc.payload, str):
            parts.append(exc.payload)
    return " ".join(parts).lower()


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = [
    "describe_error",
    "is_already_verified",
    "is_user_rejection",
    "map_api_error",
    "map_submission_error",
]
