# policy_advisor/services/explainer.py
from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from .feature_builder import chosen_categories
from .profile_classifier import ProfileTag, classify
from .validators import g

# Categories every explanation covers, whatever the customer selected.
EXPLAINED_CATEGORIES = ("health", "life", "vehicle", "accident")

_HEALTH_REASONS = (
    (ProfileTag.FAMILY, "Health insurance is essential for protecting your entire family from unexpected medical expenses."),
    (ProfileTag.HEALTH_CONSCIOUS, "Based on your health-conscious choices, we recommend comprehensive health coverage to maintain your wellbeing."),
    (ProfileTag.FREQUENT_CLAIMANT, "Your history suggests you would benefit from a robust health insurance policy with wide coverage."),
)
_LIFE_REASONS = (
    (ProfileTag.FAMILY, "Life insurance provides financial security for your family's future in case of unexpected events."),
    (ProfileTag.HIGH_INCOME, "Protect your wealth and ensure your legacy with a comprehensive life insurance policy."),
)
_VEHICLE_REASONS = (
    (ProfileTag.URBAN_RESIDENT, "Living in an urban area means higher traffic and accident risks, so comprehensive vehicle insurance is recommended."),
)
_AFFORDABLE_ACCIDENT = "Accident insurance provides affordable protection against unexpected injuries and related expenses."
_ACCIDENT_REASONS = (
    (ProfileTag.STUDENT, _AFFORDABLE_ACCIDENT),
    (ProfileTag.NEW_CUSTOMER, _AFFORDABLE_ACCIDENT),
)

# category -> (priority chain, default)
REASON_CHAINS = {
    "health": (_HEALTH_REASONS, "Health insurance provides financial protection against unexpected medical costs."),
    "life": (_LIFE_REASONS, "Life insurance offers peace of mind and financial protection for your loved ones."),
    "vehicle": (_VEHICLE_REASONS, "Vehicle insurance protects against damages and liability while driving."),
    "accident": (_ACCIDENT_REASONS, "Accident insurance covers medical costs and provides income protection if you're injured."),
}

# (required tag or None, category the customer must not already hold, text)
SUGGESTION_RULES = (
    (None, "health", "Consider adding health insurance to your portfolio for comprehensive medical coverage."),
    (ProfileTag.FAMILY, "life", "As someone with a family, life insurance is crucial for protecting your loved ones financially."),
    (ProfileTag.HIGH_INCOME, "investment", "With your income level, an investment-linked insurance policy could help grow your wealth while providing protection."),
    (ProfileTag.RURAL_RESIDENT, "crop", "Living in a rural area, you might benefit from agricultural or crop insurance coverage."),
    (ProfileTag.URBAN_RESIDENT, "home", "For urban residents, home insurance provides protection against theft, damage, and liability."),
)


@dataclass
class Explanation:
    reasons: Dict[str, str] = dc_field(default_factory=dict)
    suggestions: List[str] = dc_field(default_factory=list)


def _reasons_for(tags: FrozenSet[ProfileTag]) -> Dict[str, str]:
    reasons: Dict[str, str] = {}
    for category in EXPLAINED_CATEGORIES:
        chain, default = REASON_CHAINS[category]
        reasons[category] = next((text for tag, text in chain if tag in tags), default)
    return reasons


def _suggestions_for(tags: FrozenSet[ProfileTag], held: Sequence[str]) -> List[str]:
    held_set = set(held)
    out: List[str] = []
    for tag, category, text in SUGGESTION_RULES:
        if tag is not None and tag not in tags:
            continue
        if category not in held_set:
            out.append(text)
    return out


def explain_reasons(profile: Any, prominence_score: int) -> Dict[str, str]:
    return _reasons_for(classify(profile))


def suggest_additional(profile: Any, prominence_score: int) -> List[str]:
    return _suggestions_for(classify(profile), chosen_categories(profile))


def explain_recommendations(profile: Any, prominence_score: int) -> Explanation:
    tags = classify(profile)
    return Explanation(
        reasons=_reasons_for(tags),
        suggestions=_suggestions_for(tags, chosen_categories(profile)),
    )


def _policy_line(p: Any) -> str:
    name = str(g(p, "name", "Unknown policy"))
    provider = str(g(p, "provider", "Unknown provider"))
    premium = g(p, "premium", None)
    coverage = g(p, "coverage", None)
    line = f"- **{name}** ({provider})"
    if premium is not None:
        line += f", premium ₹{premium:,.0f}"
    if coverage is not None:
        line += f", cover ₹{coverage:,.0f}"
    return line


def render_explanation(
    explanation: Explanation,
    prominence_score: int,
    government_policies: Optional[Sequence[Any]] = None,
    private_policies: Optional[Sequence[Any]] = None,
    *,
    header: Optional[str] = None,
) -> str:
    """Markdown summary of an assessment for display."""
    hdr = header or f"Recommendations for your profile (prominence score {prominence_score}/100)"
    lines: List[str] = [hdr, ""]

    lines.append("**Why these categories matter for you:**")
    for category, reason in explanation.reasons.items():
        lines.append(f"- {category.capitalize()}: {reason}")
    lines.append("")

    for title, policies in (("Government schemes", government_policies), ("Private policies", private_policies)):
        if policies is None:
            continue
        lines.append(f"**{title}:**")
        if not policies:
            lines.append("_None matched your profile._")
        for p in policies:
            lines.append(_policy_line(p))
        lines.append("")

    if explanation.suggestions:
        lines.append("**You may also want to consider:**")
        for s in explanation.suggestions:
            lines.append(f"- {s}")
        lines.append("")

    lines.append("**Tip:** Check eligibility criteria and exclusions in each policy document before you apply.")
    return "\n".join(lines)
