# policy_advisor/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Path, Query

from .deps import get_policy_catalog, get_scorer, get_settings
from .logging_config import configure_logging
from .schemas import (
    AssessmentProfile,
    AssessmentResponse,
    CategoryBreakdown,
    ExplainResponse,
    Policy,
    ProminenceResult,
    RecommendResponse,
)
from .services.explainer import explain_recommendations, render_explanation
from .services.policy_catalog import PolicyCatalog
from .services.prominence_model import ProminenceScorer
from .services.ranker import filter_to_chosen, rank_categories, recommend_policies

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    yield
    # release the model artifact if one was loaded; the next startup reloads it
    if get_scorer.cache_info().currsize:
        get_scorer().close()
        get_scorer.cache_clear()


app = FastAPI(title="Insurance Policy Advisor", lifespan=lifespan)


# -----------------------------
# Utilities
# -----------------------------
def _breakdown(profile: AssessmentProfile, prominence_score: int) -> List[CategoryBreakdown]:
    return [
        CategoryBreakdown(category=c, score=cs.score, government_recommended=cs.government_recommended)
        for c, cs in rank_categories(profile, prominence_score)
    ]


def _recommend(profile: AssessmentProfile, prominence: ProminenceResult, catalog: PolicyCatalog, only_chosen: bool):
    rec = recommend_policies(profile, prominence.prominence_score, catalog.list_policies())
    if only_chosen:
        rec = filter_to_chosen(rec, profile)
    return rec


ONLY_CHOSEN = Query(False, description="Restrict recommendations to the categories the customer selected.")


# -----------------------------
# Routes
# -----------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/predict", response_model=ProminenceResult)
def predict(profile: AssessmentProfile, scorer: ProminenceScorer = Depends(get_scorer)):
    return scorer.score(profile)


@app.post("/recommend", response_model=RecommendResponse)
def recommend(
    profile: AssessmentProfile,
    only_chosen: bool = ONLY_CHOSEN,
    scorer: ProminenceScorer = Depends(get_scorer),
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    prominence = scorer.score(profile)
    rec = _recommend(profile, prominence, catalog, only_chosen)
    return RecommendResponse(
        prominence=prominence,
        government_policies=rec.government_policies,
        private_policies=rec.private_policies,
        categories=_breakdown(profile, prominence.prominence_score),
    )


@app.post("/explain", response_model=ExplainResponse)
def explain(profile: AssessmentProfile, scorer: ProminenceScorer = Depends(get_scorer)):
    prominence = scorer.score(profile)
    expl = explain_recommendations(profile, prominence.prominence_score)
    return ExplainResponse(
        prominence=prominence,
        reasons=expl.reasons,
        suggestions=expl.suggestions,
        explanation=render_explanation(expl, prominence.prominence_score),
    )


@app.post("/assessment", response_model=AssessmentResponse)
def assessment(
    profile: AssessmentProfile,
    only_chosen: bool = ONLY_CHOSEN,
    scorer: ProminenceScorer = Depends(get_scorer),
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    # 1) prominence
    prominence = scorer.score(profile)
    logger.info(
        "Assessment scored %d (prominent=%s)", prominence.prominence_score, prominence.is_prominent
    )

    # 2) rank catalog
    rec = _recommend(profile, prominence, catalog, only_chosen)

    # 3) explain
    expl = explain_recommendations(profile, prominence.prominence_score)
    text = render_explanation(
        expl, prominence.prominence_score, rec.government_policies, rec.private_policies
    )

    return AssessmentResponse(
        prominence=prominence,
        government_policies=rec.government_policies,
        private_policies=rec.private_policies,
        categories=_breakdown(profile, prominence.prominence_score),
        reasons=expl.reasons,
        suggestions=expl.suggestions,
        explanation=text,
    )


@app.get("/policies", response_model=List[Policy])
def list_policies(
    category: Optional[str] = Query(None, description="e.g., health, life, vehicle"),
    government: Optional[bool] = Query(None, description="Only government (true) or private (false) policies."),
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    return catalog.list_policies(category=category, government=government)


@app.get("/policies/{policy_id}", response_model=Policy)
def get_policy(policy_id: int = Path(..., ge=1), catalog: PolicyCatalog = Depends(get_policy_catalog)):
    policy = catalog.get_policy(policy_id)
    if policy is None:
        raise HTTPException(status_code=404, detail=f"Policy '{policy_id}' not found.")
    return policy
