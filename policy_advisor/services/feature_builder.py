# policy_advisor/services/feature_builder.py
from __future__ import annotations
from typing import Any, Dict, List

from .validators import field

# Closed encoder tables. Unknown codes fall back to 0.
GENDER_CODES = {"male": 0, "female": 1, "other": 2}
AREA_CODES = {"urban": 0, "rural": 1}
QUALIFICATION_CODES = {
    "high-school": 0,
    "graduate": 1,
    "post-graduate": 2,
    "doctorate": 3,
    "other": 4,
}
INCOME_CODES = {
    "below-2L": 0,
    "2L-5L": 1,
    "5L-10L": 2,
    "10L-15L": 3,
    "above-15L": 4,
}
POLICY_TYPE_CODES = {"individual": 0, "family-floater": 1, "group": 2, "corporate": 3}
MARITAL_STATUS_CODES = {"single": 0, "married": 1, "divorced": 2, "widowed": 3}

ENCODERS: Dict[str, Dict[str, int]] = {
    "gender": GENDER_CODES,
    "area": AREA_CODES,
    "qualification": QUALIFICATION_CODES,
    "income": INCOME_CODES,
    "policy_type": POLICY_TYPE_CODES,
    "marital_status": MARITAL_STATUS_CODES,
}

# Order the predictive model was trained on; do not reorder.
FEATURE_ORDER = [
    "gender",
    "area",
    "qualification",
    "income",
    "vintage",
    "claim_amount",
    "policies_count",
    "policies_chosen_count",
    "policy_type",
    "marital_status",
]

NUMERIC_FIELDS = ("vintage", "claim_amount", "policies_count")


def encode(name: str, value: Any) -> int:
    table = ENCODERS[name]
    if isinstance(value, str):
        return table.get(value.strip(), 0)
    return table.get(value, 0)


def chosen_categories(profile: Any) -> List[str]:
    """policiesChosen as a list; accepts "health,life" or ["health", "life"]."""
    raw = field(profile, "policies_chosen", "")
    if isinstance(raw, str):
        parts = raw.split(",")
    else:
        parts = [str(p) for p in raw]
    return [p.strip() for p in parts if p.strip()]


def build_features(profile: Any) -> List[float]:
    """
    Map an assessment profile -> fixed-order model feature vector (FEATURE_ORDER).
    Categoricals go through the encoder tables, numerics pass through,
    policiesChosen is reduced to its count.
    """
    feats: Dict[str, float] = {}
    for name in ENCODERS:
        feats[name] = float(encode(name, field(profile, name)))
    for name in NUMERIC_FIELDS:
        feats[name] = float(field(profile, name, 0))
    feats["policies_chosen_count"] = float(len(chosen_categories(profile)))
    return [feats[f] for f in FEATURE_ORDER]
