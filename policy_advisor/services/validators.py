# policy_advisor/services/validators.py
from __future__ import annotations

import math
from typing import Any

# snake_case attribute -> camelCase key used by raw assessment payloads
_CAMEL_KEYS = {
    "claim_amount": "claimAmount",
    "policies_count": "policiesCount",
    "policies_chosen": "policiesChosen",
    "policy_type": "policyType",
    "marital_status": "maritalStatus",
    "is_government_policy": "isGovernmentPolicy",
}


def g(obj: Any, key: str, default: Any = None) -> Any:
    """Get attribute or dict key with the same name."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def field(obj: Any, name: str, default: Any = None) -> Any:
    """Like g(), but also accepts the camelCase spelling for dict payloads."""
    val = g(obj, name, None)
    if val is None and name in _CAMEL_KEYS:
        val = g(obj, _CAMEL_KEYS[name], None)
    return default if val is None else val


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def round_half_up(value: float) -> int:
    """Round .5 up for non-negative scores (Python's round() is banker's)."""
    if not math.isfinite(value):
        raise ValueError(f"cannot round non-finite score {value!r}")
    return int(math.floor(value + 0.5))
