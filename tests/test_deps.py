"""
Tests for policy_advisor/deps.py and policy_advisor/logging_config.py.
"""

from __future__ import annotations

import json
import logging

import pytest

from policy_advisor import deps
from policy_advisor.logging_config import _JsonFormatter
from policy_advisor.services.policy_catalog import InMemoryPolicyCatalog, SqlPolicyCatalog
from policy_advisor.services.prominence_model import FormulaPredictor


@pytest.fixture(autouse=True)
def _fresh_caches():
    for fn in (deps.get_settings, deps.get_engine, deps.get_policy_catalog, deps.get_scorer):
        fn.cache_clear()
    yield
    for fn in (deps.get_settings, deps.get_engine, deps.get_policy_catalog, deps.get_scorer):
        fn.cache_clear()


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("POLICY_ADVISOR_MODEL_DIR", str(tmp_path / "models"))
    monkeypatch.setenv("POLICY_ADVISOR_MODEL_TIMEOUT_S", "2.5")
    monkeypatch.setenv("POLICY_ADVISOR_LOG_JSON", "true")
    s = deps.get_settings()
    assert s.model_dir == tmp_path / "models"
    assert s.model_timeout_s == 2.5
    assert s.log_json is True


def test_catalog_falls_back_to_seed(monkeypatch, tmp_path):
    monkeypatch.setenv("POLICY_ADVISOR_DB_PATH", str(tmp_path / "missing.sqlite"))
    catalog = deps.get_policy_catalog()
    assert isinstance(catalog, InMemoryPolicyCatalog)
    assert len(catalog.list_policies()) == 6
    with pytest.raises(FileNotFoundError):
        deps.get_engine()


def test_catalog_uses_sqlite_when_present(monkeypatch, tmp_path):
    from data_pipeline.build_policies_sqlite import build_sqlite

    db = tmp_path / "policies.sqlite"
    build_sqlite(deps.SEED_POLICIES_PATH, db)
    monkeypatch.setenv("POLICY_ADVISOR_DB_PATH", str(db))
    assert isinstance(deps.get_policy_catalog(), SqlPolicyCatalog)


def test_scorer_without_model_uses_formula(monkeypatch, tmp_path):
    monkeypatch.setenv("POLICY_ADVISOR_MODEL_DIR", str(tmp_path))
    scorer = deps.get_scorer()
    assert scorer.primary is None
    assert isinstance(scorer.fallback, FormulaPredictor)


def test_json_log_format():
    record = logging.makeLogRecord(
        {"name": "policy_advisor.test", "levelname": "WARNING", "msg": "model %s", "args": ("missing",)}
    )
    record.customer_id = 7
    payload = json.loads(_JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["msg"] == "model missing"
    assert payload["customer_id"] == 7


def test_shutdown_closes_and_forgets_scorer(monkeypatch, tmp_path):
    from fastapi.testclient import TestClient

    from policy_advisor.main import app

    monkeypatch.setenv("POLICY_ADVISOR_MODEL_DIR", str(tmp_path))
    scorer = deps.get_scorer()
    closed = []
    monkeypatch.setattr(scorer, "close", lambda: closed.append(True))
    with TestClient(app):
        pass
    assert closed == [True]
    assert deps.get_scorer.cache_info().currsize == 0
    assert deps.get_scorer() is not scorer
