"""Root logger setup for the registry client.

Environment overrides win over both the CLI level and the ``debug_logging``
setting:
  - CIPHERREG_LOG_LEVEL: explicit level name or number
  - CIPHERREG_DEBUG_LOGGING / CIPHERREG_DEBUG: truthy -> DEBUG
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
_LEVEL_VAR = "CIPHERREG_LOG_LEVEL"
_DEBUG_VARS = ("CIPHERREG_DEBUG_LOGGING", "CIPHERREG_DEBUG")
# Per-request chatter from the HTTP stack; only shown at DEBUG.
_TRANSPORT_LOGGERS = ("urllib3", "requests")


def _parse_level(value: int | str | None, fallback: int) -> int:
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Return the level forced by the environment, or None."""
    env = os.environ if environ is None else environ
    if env.get(_LEVEL_VAR):
        return _parse_level(env[_LEVEL_VAR], logging.INFO)
    if any(_truthy(env.get(name)) for name in _DEBUG_VARS):
        return logging.DEBUG
    return None


def env_forces_debug(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when the environment asks for DEBUG (or lower) logging."""
    level = env_level(environ)
    return level is not None and level <= logging.DEBUG


def _set_level(level: int) -> int:
    logging.getLogger().setLevel(level)
    transport = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport)
    return level


def configure_root(default_level: int | str = logging.INFO) -> int:
    """Install a compact stderr handler once and return the effective level."""
    forced = env_level()
    effective = forced if forced is not None else _parse_level(default_level, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=effective, format=_FORMAT, datefmt=_DATEFMT)
    return _set_level(effective)


def apply_debug_setting(debug_enabled: bool) -> int:
    """Raise the root logger to DEBUG for the ``debug_logging`` setting unless the env overrides."""
    forced = env_level()
    if forced is not None:
        return _set_level(forced)
    if not debug_enabled:
        return logging.getLogger().getEffectiveLevel()
    return _set_level(logging.DEBUG)
