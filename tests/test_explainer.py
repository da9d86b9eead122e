"""
Tests for policy_advisor/services/explainer.py.
"""

from __future__ import annotations

import pytest

from policy_advisor.services.explainer import (
    EXPLAINED_CATEGORIES,
    REASON_CHAINS,
    SUGGESTION_RULES,
    explain_reasons,
    explain_recommendations,
    render_explanation,
    suggest_additional,
)


def _default(category: str) -> str:
    return REASON_CHAINS[category][1]


def _suggestion(category: str) -> str:
    return next(text for _, cat, text in SUGGESTION_RULES if cat == category)


# ── Reasons ───────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"maritalStatus": "married", "income": "above-15L"},
        {"area": "rural", "claimAmount": 90000, "vintage": 0},
        {"qualification": "high-school", "vintage": 1, "policiesChosen": "health"},
    ],
)
def test_always_four_non_empty_reasons(make_profile, overrides):
    reasons = explain_reasons(make_profile(**overrides), 50)
    assert tuple(reasons) == EXPLAINED_CATEGORIES
    assert all(text for text in reasons.values())


def test_defaults_when_no_tag_matches(make_profile):
    reasons = explain_reasons(make_profile(area="rural", vintage=3), 10)
    for category in EXPLAINED_CATEGORIES:
        assert reasons[category] == _default(category)


def test_family_wins_health_chain(make_profile):
    p = make_profile(maritalStatus="married", policiesChosen="health", claimAmount=80000)
    reasons = explain_reasons(p, 50)
    assert "family" in reasons["health"]
    assert "family" in reasons["life"]


def test_health_conscious_beats_frequent_claimant(make_profile):
    p = make_profile(policiesChosen="health", claimAmount=80000)
    assert "health-conscious" in explain_reasons(p, 50)["health"]


def test_frequent_claimant_health_reason(make_profile):
    p = make_profile(claimAmount=80000)
    assert "history" in explain_reasons(p, 50)["health"]


def test_high_income_life_and_urban_vehicle(make_profile):
    reasons = explain_reasons(make_profile(income="10L-15L", area="urban"), 80)
    assert "wealth" in reasons["life"]
    assert "urban" in reasons["vehicle"]


@pytest.mark.parametrize("overrides", [{"vintage": 0}, {"qualification": "high-school", "vintage": 1}])
def test_affordable_accident_reason(make_profile, overrides):
    assert "affordable" in explain_reasons(make_profile(**overrides), 30)["accident"]


# ── Suggestions ───────────────────────────────────────────────────────────────

def test_scenario_a_suggestions(scenario_a):
    assert suggest_additional(scenario_a, 78) == [_suggestion("investment"), _suggestion("home")]


def test_suggestions_follow_rule_order(make_profile):
    p = make_profile(maritalStatus="married", income="above-15L", area="rural", policiesChosen="vehicle")
    assert suggest_additional(p, 50) == [
        _suggestion("health"),
        _suggestion("life"),
        _suggestion("investment"),
        _suggestion("crop"),
    ]


def test_no_suggestions_when_everything_held(make_profile):
    p = make_profile(
        maritalStatus="married",
        income="above-15L",
        area="urban",
        policiesChosen="health,life,investment,home",
    )
    assert suggest_additional(p, 90) == []


def test_explain_recommendations_matches_parts(scenario_a):
    expl = explain_recommendations(scenario_a, 78)
    assert expl.reasons == explain_reasons(scenario_a, 78)
    assert expl.suggestions == suggest_additional(scenario_a, 78)


# ── Rendering ─────────────────────────────────────────────────────────────────

def test_render_explanation(scenario_a, seed_policies):
    expl = explain_recommendations(scenario_a, 78)
    text = render_explanation(expl, 78, seed_policies[:1], [])
    assert "prominence score 78/100" in text
    assert "Pradhan Mantri Jeevan Jyoti Bima Yojana" in text
    assert "_None matched your profile._" in text
    for s in expl.suggestions:
        assert s in text


def test_render_without_policy_sections(scenario_a):
    text = render_explanation(explain_recommendations(scenario_a, 78), 78, header="Hello")
    assert text.startswith("Hello")
    assert "Government schemes" not in text
