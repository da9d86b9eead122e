"""
Shared pytest fixtures for the policy advisor test suite.

Provides:
  - ``make_profile``: factory for ``AssessmentProfile`` with overridable fields.
  - ``scenario_a``: the high-income, married, urban reference customer.
  - ``seed_policies`` / ``seed_catalog``: the bundled six-policy catalog.
"""

from __future__ import annotations

from typing import Any, Callable, List

import pytest

from policy_advisor.deps import SEED_POLICIES_PATH
from policy_advisor.schemas import AssessmentProfile, Policy
from policy_advisor.services.policy_catalog import InMemoryPolicyCatalog, load_seed_policies


_BASE_PROFILE = {
    "gender": "male",
    "area": "urban",
    "qualification": "graduate",
    "income": "5L-10L",
    "vintage": 3,
    "claimAmount": 0,
    "policiesCount": 1,
    "policiesChosen": "life",
    "policyType": "individual",
    "maritalStatus": "single",
}


@pytest.fixture
def make_profile() -> Callable[..., AssessmentProfile]:
    def _make(**overrides: Any) -> AssessmentProfile:
        data = dict(_BASE_PROFILE)
        data.update(overrides)
        return AssessmentProfile(**data)

    return _make


@pytest.fixture
def scenario_a(make_profile) -> AssessmentProfile:
    return make_profile(
        income="above-15L",
        vintage=6,
        claimAmount=0,
        policiesCount=4,
        maritalStatus="married",
        area="urban",
        policiesChosen="health,life",
    )


@pytest.fixture
def seed_policies() -> List[Policy]:
    return load_seed_policies(SEED_POLICIES_PATH)


@pytest.fixture
def seed_catalog(seed_policies) -> InMemoryPolicyCatalog:
    return InMemoryPolicyCatalog(seed_policies)


def make_policy(policy_id: int, category: str, government: bool, **kw: Any) -> Policy:
    return Policy(
        id=policy_id,
        name=kw.pop("name", f"{category} policy {policy_id}"),
        description=kw.pop("description", "test policy"),
        category=category,
        provider=kw.pop("provider", "Government of India" if government else "InsureTech"),
        is_government_policy=government,
        **kw,
    )


@pytest.fixture
def policy_factory() -> Callable[..., Policy]:
    return make_policy
