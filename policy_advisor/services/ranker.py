# policy_advisor/services/ranker.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, Iterable, List, NamedTuple, Sequence, Tuple

from .feature_builder import chosen_categories
from .profile_classifier import ProfileTag, classify
from .prominence_model import PROMINENCE_THRESHOLD
from .validators import field

logger = logging.getLogger(__name__)

PRIVATE_BOOST = 1.25        # prominent customers: private-leaning categories
GOVERNMENT_DAMPEN = 0.9     # prominent customers: government-leaning categories
GOVERNMENT_BOOST = 1.25     # everyone else: government-leaning categories


class CategoryRule(NamedTuple):
    category: str
    government_recommended: bool
    priority: int


# Per-tag (category, government recommended, priority) contributions.
TAG_POLICY_SCORES: Dict[ProfileTag, Tuple[CategoryRule, ...]] = {
    ProfileTag.HIGH_INCOME: (
        CategoryRule("life", False, 9),
        CategoryRule("health", False, 8),
        CategoryRule("investment", False, 9),
        CategoryRule("vehicle", False, 7),
    ),
    ProfileTag.LOW_INCOME: (
        CategoryRule("life", True, 9),
        CategoryRule("health", True, 10),
        CategoryRule("accident", True, 8),
    ),
    ProfileTag.SENIOR: (
        CategoryRule("health", True, 10),
        CategoryRule("life", True, 7),
    ),
    ProfileTag.STUDENT: (
        CategoryRule("accident", True, 8),
        CategoryRule("health", True, 7),
    ),
    ProfileTag.FAMILY: (
        CategoryRule("health", True, 10),
        CategoryRule("life", True, 9),
        CategoryRule("home", False, 7),
    ),
    ProfileTag.RURAL_RESIDENT: (
        CategoryRule("crop", True, 9),
        CategoryRule("health", True, 10),
    ),
    ProfileTag.URBAN_RESIDENT: (
        CategoryRule("vehicle", False, 8),
        CategoryRule("home", False, 7),
    ),
    ProfileTag.HEALTH_CONSCIOUS: (
        CategoryRule("health", False, 10),
        CategoryRule("accident", False, 8),
    ),
    ProfileTag.FREQUENT_CLAIMANT: (
        CategoryRule("health", True, 9),
        CategoryRule("accident", True, 8),
    ),
    ProfileTag.NEW_CUSTOMER: (
        CategoryRule("health", True, 8),
        CategoryRule("accident", True, 7),
    ),
    ProfileTag.LOYAL_CUSTOMER: (
        CategoryRule("life", False, 9),
        CategoryRule("health", False, 9),
        CategoryRule("vehicle", False, 8),
    ),
}


@dataclass(frozen=True)
class CategoryScore:
    score: float
    government_recommended: bool


@dataclass
class RecommendedPolicies:
    government_policies: List[Any] = dc_field(default_factory=list)
    private_policies: List[Any] = dc_field(default_factory=list)


_UNSCORED = CategoryScore(0.0, False)


def build_category_scores(tags: Iterable[ProfileTag]) -> Dict[str, CategoryScore]:
    """Sum priorities per category; once any rule says government, it stays government."""
    tag_set = set(tags)
    scores: Dict[str, CategoryScore] = {}
    # walk in declaration order so category insertion order is stable
    for tag in ProfileTag:
        if tag not in tag_set:
            continue
        for rule in TAG_POLICY_SCORES.get(tag, ()):
            cur = scores.get(rule.category)
            if cur is None:
                scores[rule.category] = CategoryScore(float(rule.priority), rule.government_recommended)
            else:
                scores[rule.category] = CategoryScore(
                    cur.score + rule.priority,
                    cur.government_recommended or rule.government_recommended,
                )
    return scores


def adjust_for_prominence(scores: Dict[str, CategoryScore], prominence_score: int) -> Dict[str, CategoryScore]:
    """
    Prominent customers get private-leaning categories boosted and government
    ones dampened; everyone else gets government-leaning categories boosted.
    Returns a new map.
    """
    adjusted: Dict[str, CategoryScore] = {}
    prominent = prominence_score >= PROMINENCE_THRESHOLD
    for category, cs in scores.items():
        if prominent:
            factor = GOVERNMENT_DAMPEN if cs.government_recommended else PRIVATE_BOOST
        else:
            factor = GOVERNMENT_BOOST if cs.government_recommended else 1.0
        adjusted[category] = CategoryScore(cs.score * factor, cs.government_recommended)
    return adjusted


def category_scores_for(profile: Any, prominence_score: int) -> Dict[str, CategoryScore]:
    tags = classify(profile)
    logger.debug("Profile tags: %s", sorted(t.value for t in tags))
    return adjust_for_prominence(build_category_scores(tags), prominence_score)


def rank_categories(profile: Any, prominence_score: int) -> List[Tuple[str, CategoryScore]]:
    """Adjusted category scores, best first (ties keep table order)."""
    scores = category_scores_for(profile, prominence_score)
    return sorted(scores.items(), key=lambda kv: kv[1].score, reverse=True)


def recommend_policies(profile: Any, prominence_score: int, catalog: Sequence[Any]) -> RecommendedPolicies:
    """
    Rank catalog policies by their category's adjusted score and split them
    into government and private lists. Catalog entries are returned as-is.
    """
    scores = category_scores_for(profile, prominence_score)

    scored = []
    for policy in catalog:
        cs = scores.get(field(policy, "category"), _UNSCORED)
        scored.append((policy, cs))

    # sorted() is stable: equal scores keep catalog order
    scored = sorted(scored, key=lambda pc: pc[1].score, reverse=True)

    out = RecommendedPolicies()
    prominent = prominence_score >= PROMINENCE_THRESHOLD
    for policy, cs in scored:
        if field(policy, "is_government_policy", False):
            # prominent customers only see government schemes in government-leaning categories
            if cs.government_recommended or not prominent:
                out.government_policies.append(policy)
        else:
            out.private_policies.append(policy)
    return out


def filter_to_chosen(recommended: RecommendedPolicies, profile: Any) -> RecommendedPolicies:
    """Keep only policies in the categories the customer asked about."""
    chosen = set(chosen_categories(profile))
    return RecommendedPolicies(
        government_policies=[p for p in recommended.government_policies if field(p, "category") in chosen],
        private_policies=[p for p in recommended.private_policies if field(p, "category") in chosen],
    )
