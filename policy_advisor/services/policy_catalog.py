# policy_advisor/services/policy_catalog.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..schemas import Policy

logger = logging.getLogger(__name__)

JSON_COLUMNS = ("eligibility_criteria", "benefits")

SELECT_ALL = text("""
SELECT id, name, description, category, provider, premium, coverage,
       eligibility_criteria, benefits, is_government_policy
FROM policies
ORDER BY id
""")

SELECT_ONE = text("""
SELECT id, name, description, category, provider, premium, coverage,
       eligibility_criteria, benefits, is_government_policy
FROM policies
WHERE id = :pid
LIMIT 1
""")


class PolicyCatalog:
    """Read-only access to the policies the engine can recommend."""

    def list_policies(self, category: Optional[str] = None, government: Optional[bool] = None) -> List[Policy]:
        raise NotImplementedError

    def get_policy(self, policy_id: int) -> Optional[Policy]:
        raise NotImplementedError


def _matches(p: Policy, category: Optional[str], government: Optional[bool]) -> bool:
    if category is not None and p.category != category:
        return False
    if government is not None and p.is_government_policy != government:
        return False
    return True


class InMemoryPolicyCatalog(PolicyCatalog):
    def __init__(self, policies: Iterable[Policy]):
        self._policies: Dict[int, Policy] = {}
        for p in policies:
            if p.id in self._policies:
                raise ValueError(f"Duplicate policy id {p.id}")
            self._policies[p.id] = p

    def list_policies(self, category: Optional[str] = None, government: Optional[bool] = None) -> List[Policy]:
        return [p for p in self._policies.values() if _matches(p, category, government)]

    def get_policy(self, policy_id: int) -> Optional[Policy]:
        return self._policies.get(policy_id)


def _row_to_policy(row: Dict[str, Any]) -> Policy:
    for col in JSON_COLUMNS:
        val = row.get(col)
        if isinstance(val, str):
            row[col] = json.loads(val) if val else {}
        elif val is None:
            row[col] = {}
    # pandas turns nullable integer columns into floats / NaN
    for col in ("premium", "coverage"):
        val = row.get(col)
        row[col] = None if val is None or pd.isna(val) else int(val)
    row["id"] = int(row["id"])
    row["is_government_policy"] = bool(row.get("is_government_policy") or 0)
    return Policy(**row)


class SqlPolicyCatalog(PolicyCatalog):
    def __init__(self, engine: Engine):
        self.engine = engine

    def list_policies(self, category: Optional[str] = None, government: Optional[bool] = None) -> List[Policy]:
        df = pd.read_sql(SELECT_ALL, self.engine)
        policies = [_row_to_policy(r) for r in df.to_dict(orient="records")]
        return [p for p in policies if _matches(p, category, government)]

    def get_policy(self, policy_id: int) -> Optional[Policy]:
        df = pd.read_sql(SELECT_ONE, self.engine, params={"pid": policy_id})
        if df.empty:
            return None
        return _row_to_policy(df.iloc[0].to_dict())


def load_seed_policies(path: Path) -> List[Policy]:
    with open(path, "r", encoding="utf-8") as f:
        rows = json.load(f)
    return [Policy(**r) for r in rows]


def policies_to_frame(policies: Iterable[Policy]) -> pd.DataFrame:
    """Flatten policies for a SQL table (JSON columns as text)."""
    rows = []
    for p in policies:
        row = p.model_dump()
        for col in JSON_COLUMNS:
            row[col] = json.dumps(row[col])
        row["is_government_policy"] = int(row["is_government_policy"])
        rows.append(row)
    return pd.DataFrame(rows)
