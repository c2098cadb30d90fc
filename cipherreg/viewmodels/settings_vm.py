from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..utils.logging import env_forces_debug

ENV_OVERRIDES: Dict[str, str] = {
    "gateway_url": "CIPHERREG_GATEWAY_URL",
    "relayer_url": "CIPHERREG_RELAYER_URL",
    "api_key": "CIPHERREG_API_KEY",
}

_INT_FIELDS = {
    "request_timeout_s",
    "retries",
    "confirmation_timeout_s",
    "confirmation_poll_ms",
    "success_dismiss_ms",
    "error_dismiss_ms",
    "history_limit",
    "recent_window_days",
}
_POSITIVE_FIELDS = _INT_FIELDS - {"retries", "confirmation_timeout_s"}
_URL_FIELDS = {"gateway_url", "relayer_url"}


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    gateway_url: str = ""
    relayer_url: str = ""
    api_key: str = ""
    request_timeout_s: int = 10
    retries: int = 2
    confirmation_timeout_s: int = 120
    """Seconds to wait for a transaction receipt; 0 waits indefinitely."""
    confirmation_poll_ms: int = 1000
    success_dismiss_ms: int = 2000
    error_dismiss_ms: int = 3000
    history_limit: int = 10
    recent_window_days: int = 7
    debug_logging: bool = False

    def uses_mock_services(self) -> bool:
        """True unless both the gateway and the relayer URL are set."""
        return not (self.gateway_url and self.relayer_url)


def _default_debug_logging() -> bool:
    return env_forces_debug()


class SettingsVM:
    """Keeps client settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig(debug_logging=_default_debug_logging())
        self.on_save = on_save

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        return all(
            not value or value.startswith(("http://", "https://"))
            for value in (self.config.gateway_url, self.config.relayer_url)
        )

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        known = {f.name for f in fields(SettingsConfig)}
        unknown = set(payload.keys()) - known
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates = {key: self._coerce_config_value(key, payload[key]) for key in known if key in payload}
        if updates:
            self.config = replace(self.config, **updates)

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Let ``CIPHERREG_*`` environment variables override persisted values."""
        env = os.environ if environ is None else environ
        overrides = {
            key: env[var] for key, var in ENV_OVERRIDES.items() if env.get(var)
        }
        if overrides:
            self.apply_dict(overrides)

    def to_dict(self) -> dict:
        return asdict(self.config)

    def set_debug_logging(self, enabled: bool) -> None:
        self.config = replace(self.config, debug_logging=self._coerce_bool(enabled))

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key in _URL_FIELDS:
            return self._coerce_url(key, raw)
        if key == "api_key":
            return self._coerce_optional_str(raw)
        if key in _INT_FIELDS:
            value = self._coerce_int(key, raw, allow_negative=False)
            if key in _POSITIVE_FIELDS and value == 0:
                raise ValueError(f"{key} must be greater than zero.")
            return value
        if key == "debug_logging":
            return self._coerce_bool(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(name: str, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string URL.")
        return value.strip().rstrip("/")

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, allow_negative: bool = True) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if not allow_negative and coerced < 0:
            raise ValueError(f"{name} must be non-negative.")
        return coerced
