# policy_advisor/services/prominence_model.py
from __future__ import annotations

import json
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional

import lightgbm as lgb
import numpy as np
import xgboost as xgb

from ..schemas import ProminenceResult
from .feature_builder import FEATURE_ORDER, build_features, encode
from .validators import clamp, field, round_half_up

logger = logging.getLogger(__name__)

PROMINENCE_THRESHOLD = 70

LGB_MODEL_FILE = "prominence_lgb.txt"
XGB_MODEL_FILE = "prominence_xgb.json"
META_FILE = "meta.json"


class Predictor:
    """Produces a raw prominence score on the 0..100 scale."""

    name = "base"

    def predict(self, profile: Any) -> float:
        raise NotImplementedError

    def close(self) -> None:
        pass


class FormulaPredictor(Predictor):
    """Deterministic additive score used when no model artifact is usable."""

    name = "formula"

    def predict(self, profile: Any) -> float:
        income = field(profile, "income")
        policies_count = field(profile, "policies_count", 0)
        vintage = field(profile, "vintage", 0)
        claim_amount = field(profile, "claim_amount", 0)

        score = 0.0
        # income bracket index (0..4) -> up to 40 points
        score += encode("income", income) * 10
        score += min(policies_count * 5, 30)
        score += min(vintage * 3, 30)
        # claims pull the score down, at most 20 points
        score -= min((claim_amount / 50000) * 10, 20)
        return clamp(score, 0, 100)


class ModelPredictor(Predictor):
    """Wraps a trained booster whose single output is a probability in [0, 1]."""

    name = "model"

    def __init__(self, booster: Any, framework: str = "lightgbm"):
        self.booster = booster
        self.framework = framework

    @classmethod
    def load(cls, model_dir: Path) -> "ModelPredictor":
        meta_path = model_dir / META_FILE
        framework = "lightgbm"
        if meta_path.exists():
            with open(meta_path, "r") as f:
                framework = json.load(f).get("framework", "lightgbm")

        if framework == "lightgbm":
            path = model_dir / LGB_MODEL_FILE
            if not path.exists():
                raise FileNotFoundError(f"{path} not found")
            booster = lgb.Booster(model_file=str(path))
        elif framework == "xgboost":
            path = model_dir / XGB_MODEL_FILE
            if not path.exists():
                raise FileNotFoundError(f"{path} not found")
            booster = xgb.Booster()
            booster.load_model(str(path))
        else:
            raise ValueError(f"Unsupported model framework: {framework!r}")
        return cls(booster, framework)

    def predict(self, profile: Any) -> float:
        if self.booster is None:
            raise RuntimeError("model already released")
        x = np.array([build_features(profile)], dtype=float)
        if self.framework == "xgboost":
            dm = xgb.DMatrix(x, feature_names=FEATURE_ORDER)
            yhat = float(self.booster.predict(dm)[0])
        else:
            yhat = float(self.booster.predict(x)[0])
        if not math.isfinite(yhat):
            raise ValueError(f"model returned non-finite output {yhat!r}")
        return yhat * 100

    def close(self) -> None:
        # boosters free their native handle on collection
        self.booster = None


def make_predictor(model_dir: Optional[Path]) -> Predictor:
    """Probe the model artifact once; fall back to the formula if it is unusable."""
    if model_dir is None:
        return FormulaPredictor()
    try:
        predictor = ModelPredictor.load(Path(model_dir))
    except Exception as e:
        logger.warning("Prominence model unavailable (%s); using fallback formula", e)
        return FormulaPredictor()
    logger.info("Loaded %s prominence model from %s", predictor.framework, model_dir)
    return predictor


def to_result(raw_score: float) -> ProminenceResult:
    score = int(clamp(round_half_up(raw_score), 0, 100))
    return ProminenceResult(is_prominent=score >= PROMINENCE_THRESHOLD, prominence_score=score)


SAFE_DEFAULT = ProminenceResult(is_prominent=False, prominence_score=0)


class ProminenceScorer:
    def __init__(
        self,
        primary: Optional[Predictor] = None,
        fallback: Optional[Predictor] = None,
        timeout_s: Optional[float] = None,
    ):
        self.fallback = fallback or FormulaPredictor()
        # a formula primary is the fallback itself; skip the double evaluation
        if primary is not None and isinstance(primary, FormulaPredictor):
            primary = None
        self.primary = primary
        self.timeout_s = timeout_s
        # one worker per scorer: a hung inference ties up at most this thread
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> "ProminenceScorer":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            # a still-running inference thread is not waited on
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        if self.primary is not None:
            self.primary.close()

    def _predict_primary(self, profile: Any) -> float:
        if not self.timeout_s:
            return self.primary.predict(profile)
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prominence-model")
        return self._executor.submit(self.primary.predict, profile).result(timeout=self.timeout_s)

    def score(self, profile: Any) -> ProminenceResult:
        if self.primary is not None:
            try:
                return to_result(self._predict_primary(profile))
            except Exception as e:
                logger.warning(
                    "Prominence model inference failed (%s: %s); using fallback formula",
                    type(e).__name__, e,
                )
        try:
            return to_result(self.fallback.predict(profile))
        except Exception:
            logger.error("Prominence scoring failed; returning safe default", exc_info=True)
            return SAFE_DEFAULT


def score_prominence(profile: Any, scorer: Optional[ProminenceScorer] = None) -> ProminenceResult:
    if scorer is None:
        scorer = ProminenceScorer()
    return scorer.score(profile)
