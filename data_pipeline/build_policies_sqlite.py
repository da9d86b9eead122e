"""
Build SQLite policy catalog for FastAPI
---------------------------------------
Input:  policy_advisor/data/seed_policies.json (or --seed)
Output: policy_advisor/data/policies.sqlite (or --out)
"""

import argparse
import sqlite3
from pathlib import Path

from policy_advisor.deps import SEED_POLICIES_PATH, SQLITE_PATH
from policy_advisor.services.policy_catalog import load_seed_policies, policies_to_frame


def build_sqlite(seed_path: Path = SEED_POLICIES_PATH, out_db: Path = SQLITE_PATH) -> int:
    if not seed_path.exists():
        raise FileNotFoundError(f"{seed_path} not found")

    policies = load_seed_policies(seed_path)
    df = policies_to_frame(policies)
    print(f"Loaded {len(df)} policies")

    out_db.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(out_db) as conn:
        df.to_sql("policies", conn, index=False, if_exists="replace")
        conn.commit()

    print(f"✅ SQLite policy catalog created at {out_db}")
    return len(df)


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument("--seed", type=Path, default=SEED_POLICIES_PATH)
    ap.add_argument("--out", type=Path, default=SQLITE_PATH)
    args = ap.parse_args()
    build_sqlite(args.seed, args.out)
