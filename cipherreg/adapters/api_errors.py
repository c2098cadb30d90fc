from __future__ import annotations

from typing import Any, Dict, Optional


class ApiError(RuntimeError):
    """Base class for gateway and relayer adapter failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from the gateway (includes signer rejections and contract reverts)."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            status=status,
            code=code,
            hint=hint,
            payload=payload,
            context=context,
        )


class ApiServerError(ApiError):
    """HTTP 5xx from the gateway."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            status=status,
            payload=payload,
            context=context,
        )


class ApiTimeoutError(ApiError):
    """Transport level timeout or connectivity failure."""

    def __init__(
        self,
        message: str,
        *,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, context=context)


class TransactionFailedError(ApiError):
    """A submitted transaction reverted, was dropped, or never confirmed in time."""

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        code: Optional[str] = "CONFIRMATION_FAILED",
        payload: Any = None,
    ) -> None:
        super().__init__(message, code=code, payload=payload, context=tx_hash)
        self.tx_hash = tx_hash


def parse_error_payload(resp: Any) -> Any:
    """Best-effort extraction of error payload without raising."""
    try:
        return resp.json()
    except ValueError:
        snippet = getattr(resp, "text", "")
        if not snippet:
            return None
        return snippet[:400]


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def extract_error_code(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("code", "error_code", "reason"):
            value = payload.get(key)
            if value is None:
                continue
            if isinstance(value, str):
                return value
            return str(value)
    return None


def extract_error_hint(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("hint", "details", "revert_reason"):
            if key not in payload:
                continue
            text = stringify(payload[key])
            if text:
                return text
    if isinstance(payload, str):
        return payload.strip() or None
    return None


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("detail", "message", "error", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, (list, dict)):
                candidate = first_string(value)
                if candidate:
                    return candidate
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None


def stringify(data: Any, *, limit: int = 200) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, str):
        cleaned = data.strip()
        return cleaned[:limit] if cleaned else None
    if isinstance(data, list):
        parts = [text for text in (stringify(item, limit=limit) for item in data[:3]) if text]
        return "; ".join(parts)[:limit] if parts else None
    if isinstance(data, dict):
        pairs = []
        for key, value in list(data.items())[:4]:
            value_text = stringify(value, limit=limit)
            if value_text:
                pairs.append(f"{key}={value_text}")
        return ", ".join(pairs)[:limit] if pairs else None
    text = str(data).strip()
    return text[:limit] if text else None


def ensure_ok(resp: Any, ctx: str) -> None:
    """Raise the typed ``ApiError`` matching a non-2xx response."""
    status = int(getattr(resp, "status_code", 0) or 0)
    if 200 <= status < 300:
        return
    payload = parse_error_payload(resp)
    message = build_error_message(ctx, status, payload)
    code = extract_error_code(payload)
    hint = extract_error_hint(payload)
    if 400 <= status < 500:
        raise ApiClientError(
            message,
            status=status,
            code=code,
            hint=hint,
            payload=payload,
            context=ctx,
        )
    if 500 <= status < 600:
        raise ApiServerError(
            message,
            status=status,
            payload=payload,
            context=ctx,
        )
    raise ApiError(message, status=status, payload=payload, context=ctx)


def json_object(resp: Any, ctx: str) -> Dict[str, Any]:
    """Decode a JSON object body or raise ``ApiError``."""
    try:
        data = resp.json()
    except ValueError as exc:
        snippet = getattr(resp, "text", "")[:400]
        raise ApiError(f"{ctx}: invalid JSON response: {snippet}", context=ctx) from exc
    if not isinstance(data, dict):
        raise ApiError(f"{ctx}: expected JSON object", payload=data, context=ctx)
    return data
