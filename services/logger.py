from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from models.classification import ClassificationResult
from models.factors import FactorSet
from models.observation import ObservationSet

logger = logging.getLogger("stormcast.logger")

_BASE_DIR = Path(__file__).resolve().parent.parent / "data" / "logs"


def _ensure_dir(subdir: str) -> Path:
    path = _BASE_DIR / subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def _today_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _append_jsonl(subdir: str, record: dict[str, Any]) -> None:
    """Append a single JSON record to today's JSONL file in the given subdirectory."""
    dir_path = _ensure_dir(subdir)
    filepath = dir_path / f"{_today_str()}.jsonl"
    try:
        with open(filepath, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except OSError as exc:
        logger.error("Failed to write log to %s: %s", filepath, exc)


def _round(value: float | None, digits: int = 4) -> float | None:
    return round(value, digits) if value is not None else None


def log_factor_set(
    factors: FactorSet,
    timestamp: datetime | None = None,
) -> None:
    """Log a factor snapshot to data/logs/factors/."""
    ts = timestamp or datetime.now(timezone.utc)
    record = {"timestamp": ts.isoformat()}
    for key, value in factors.to_dict().items():
        record[key] = _round(value) if isinstance(value, float) else value
    _append_jsonl("factors", record)


def log_classification(
    factors: FactorSet,
    result: ClassificationResult,
    timestamp: datetime | None = None,
) -> None:
    """Log a classification (with the factors that produced it) to data/logs/classifications/."""
    ts = timestamp or datetime.now(timezone.utc)
    record = {
        "timestamp": ts.isoformat(),
        "region": factors.region_key,
        "day_of_year": factors.day_of_year,
        "source": factors.source,
        "primary": result.primary,
        "secondary": result.secondary,
        "confidence": _round(result.confidence, 3),
        "severity": result.severity,
        "category": result.category,
        "temperature_regime": result.temperature_regime,
        "regime_override": result.regime_override,
        "danger": _round(factors.danger),
        "candidates": [
            {"type": c.type, "score": _round(c.score, 3), "severity": c.severity}
            for c in result.candidates
        ],
    }
    _append_jsonl("classifications", record)


def log_observations(
    observations: ObservationSet,
    timestamp: datetime | None = None,
) -> None:
    """Log a live observation snapshot to data/logs/observations/."""
    ts = timestamp or datetime.now(timezone.utc)
    record = {"timestamp": ts.isoformat(), **asdict(observations)}
    _append_jsonl("observations", record)
