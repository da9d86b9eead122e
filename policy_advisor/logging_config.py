"""
Logging setup for the policy advisor service.

Call ``configure_logging()`` once when the app starts. Library modules only
use ``logging.getLogger(__name__)`` and never configure handlers themselves.

With ``json_format=True`` each record is one JSON object per line::

    {"ts": "2026-10-19T09:00:00Z", "level": "WARNING", "logger": "...", "msg": "..."}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# attributes every LogRecord has; anything else came from extra=
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, val in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)

    formatter: logging.Formatter
    if json_format:
        formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(lvl)
    console.setFormatter(formatter)

    logging.basicConfig(level=lvl, handlers=[console], force=True)

    # LightGBM/XGBoost are chatty at INFO
    logging.getLogger("lightgbm").setLevel(logging.WARNING)
    logging.getLogger("xgboost").setLevel(logging.WARNING)
