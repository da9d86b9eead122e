# policy_advisor/services/profile_classifier.py
from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet

from .feature_builder import chosen_categories
from .validators import field


class ProfileTag(str, Enum):
    HIGH_INCOME = "HighIncome"
    LOW_INCOME = "LowIncome"
    # no age/birthdate in the assessment, so nothing derives Senior yet
    SENIOR = "Senior"
    STUDENT = "Student"
    FAMILY = "Family"
    RURAL_RESIDENT = "RuralResident"
    URBAN_RESIDENT = "UrbanResident"
    HEALTH_CONSCIOUS = "HealthConscious"
    FREQUENT_CLAIMANT = "FrequentClaimant"
    NEW_CUSTOMER = "NewCustomer"
    LOYAL_CUSTOMER = "LoyalCustomer"


HIGH_INCOME_BRACKETS = {"above-15L", "10L-15L"}
LOW_INCOME_BRACKETS = {"below-2L"}
FREQUENT_CLAIM_THRESHOLD = 50000


def classify(profile: Any) -> FrozenSet[ProfileTag]:
    """
    Rule-based customer archetypes. Rules are independent; a profile may
    carry any number of tags, including none.
    """
    tags = set()
    income = field(profile, "income")
    if isinstance(income, str):
        income = income.strip()
    vintage = field(profile, "vintage", 0)

    if income in HIGH_INCOME_BRACKETS:
        tags.add(ProfileTag.HIGH_INCOME)
    elif income in LOW_INCOME_BRACKETS:
        tags.add(ProfileTag.LOW_INCOME)

    if field(profile, "qualification") == "high-school" and vintage < 2:
        tags.add(ProfileTag.STUDENT)

    if field(profile, "marital_status") == "married":
        tags.add(ProfileTag.FAMILY)

    area = field(profile, "area")
    if area == "rural":
        tags.add(ProfileTag.RURAL_RESIDENT)
    elif area == "urban":
        tags.add(ProfileTag.URBAN_RESIDENT)

    if "health" in chosen_categories(profile):
        tags.add(ProfileTag.HEALTH_CONSCIOUS)

    if field(profile, "claim_amount", 0) > FREQUENT_CLAIM_THRESHOLD:
        tags.add(ProfileTag.FREQUENT_CLAIMANT)

    if vintage < 1:
        tags.add(ProfileTag.NEW_CUSTOMER)
    elif vintage >= 5:
        tags.add(ProfileTag.LOYAL_CUSTOMER)

    return frozenset(tags)
