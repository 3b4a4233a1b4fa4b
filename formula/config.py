"""Evaluation limits from environment variables.

    FORMULA_MAX_DEPTH   — maximum nesting depth (parentheses, negations, ^ and $ chains)
    FORMULA_MAX_TOKENS  — maximum number of tokens in one formula

Unset or empty means unlimited. There is no built-in default threshold.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from formula.models import Limits

MAX_DEPTH_VAR = "FORMULA_MAX_DEPTH"
MAX_TOKENS_VAR = "FORMULA_MAX_TOKENS"


def _positive_int(env: Mapping[str, str], key: str) -> Optional[int]:
    """Read a positive integer from env[key]; None if unset or blank."""
    raw = env.get(key, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be a positive integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be a positive integer, got {raw!r}")
    return value


def load_limits(
    env: Optional[Mapping[str, str]] = None,
    max_depth: Optional[int] = None,
    max_tokens: Optional[int] = None,
) -> Limits:
    """Build Limits from the environment, with explicit values taking priority.

    Args:
        env: Mapping to read from. Defaults to os.environ.
        max_depth: Overrides FORMULA_MAX_DEPTH when given.
        max_tokens: Overrides FORMULA_MAX_TOKENS when given.

    Raises:
        ValueError: if a variable or override is not a positive integer.
    """
    env = os.environ if env is None else env
    for name, value in (("max_depth", max_depth), ("max_tokens", max_tokens)):
        if value is not None and value <= 0:
            raise ValueError(f"{name} must be a positive integer, got {value}")

    return Limits(
        max_depth=max_depth if max_depth is not None else _positive_int(env, MAX_DEPTH_VAR),
        max_tokens=max_tokens if max_tokens is not None else _positive_int(env, MAX_TOKENS_VAR),
    )
