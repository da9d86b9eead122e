import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine

ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"
MODELS_DIR = DATA_DIR / "models"
SQLITE_PATH = DATA_DIR / "policies.sqlite"
SEED_POLICIES_PATH = DATA_DIR / "seed_policies.json"

load_dotenv(ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    model_dir: Path = MODELS_DIR
    db_path: Path = SQLITE_PATH
    model_timeout_s: Optional[float] = None
    log_level: str = "INFO"
    log_json: bool = False


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    timeout = os.getenv("POLICY_ADVISOR_MODEL_TIMEOUT_S")
    return Settings(
        model_dir=Path(os.getenv("POLICY_ADVISOR_MODEL_DIR", str(MODELS_DIR))),
        db_path=Path(os.getenv("POLICY_ADVISOR_DB_PATH", str(SQLITE_PATH))),
        model_timeout_s=float(timeout) if timeout else None,
        log_level=os.getenv("POLICY_ADVISOR_LOG_LEVEL", "INFO"),
        log_json=_env_bool("POLICY_ADVISOR_LOG_JSON"),
    )


@lru_cache(maxsize=1)
def get_engine():
    db_path = get_settings().db_path
    if not db_path.exists():
        # Placeholder; data_pipeline/build_policies_sqlite.py creates this
        raise FileNotFoundError("policies.sqlite not found. Run data_pipeline/build_policies_sqlite.py")
    return create_engine(f"sqlite:///{db_path}")


@lru_cache(maxsize=1)
def get_policy_catalog():
    from .services.policy_catalog import InMemoryPolicyCatalog, SqlPolicyCatalog, load_seed_policies

    if get_settings().db_path.exists():
        return SqlPolicyCatalog(get_engine())
    return InMemoryPolicyCatalog(load_seed_policies(SEED_POLICIES_PATH))


@lru_cache(maxsize=1)
def get_scorer():
    from .services.prominence_model import ProminenceScorer, make_predictor

    settings = get_settings()
    return ProminenceScorer(make_predictor(settings.model_dir), timeout_s=settings.model_timeout_s)
