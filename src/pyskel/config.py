"""Environment toggles. Read at call time; explicit arguments win."""

from __future__ import annotations

import os as _os
from typing import Optional

MAX_NESTING_ENV = "PYSKEL_MAX_NESTING"
STRICT_DEDENT_ENV = "PYSKEL_STRICT_DEDENT"
DEBUG_PY_TRACE_ENV = "PYSKEL_DEBUG_PY_TRACE"

DEFAULT_MAX_NESTING = 100

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str) -> bool:
    value = _os.environ.get(name)
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    value = _os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed < 1:
        raise ValueError(f"{name} must be at least 1, got {parsed}")
    return parsed


def max_nesting(override: Optional[int] = None) -> int:
    if override is not None:
        return override
    return env_int(MAX_NESTING_ENV, DEFAULT_MAX_NESTING)


def strict_dedent(override: Optional[bool] = None) -> bool:
    if override is not None:
        return override
    return env_flag(STRICT_DEDENT_ENV)


def debug_py_trace_enabled() -> bool:
    return env_flag(DEBUG_PY_TRACE_ENV)
