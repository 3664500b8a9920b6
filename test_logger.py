#!/usr/bin/env python3
"""
STORMCAST — JSONL snapshot logger tests.
"""
import json
from datetime import datetime, timezone

from models.observation import ObservationSet
from services import logger as snapshot_logger
from services.classifier import Classifier
from services.factor_engine import FactorEngine

_TS = datetime(2025, 4, 15, 18, 0, tzinfo=timezone.utc)


def _read(path):
    files = list(path.glob("*.jsonl"))
    assert len(files) == 1, files
    return [json.loads(line) for line in files[0].read_text().splitlines()]


def test_factor_and_classification_records(tmp_path, monkeypatch):
    monkeypatch.setattr(snapshot_logger, "_BASE_DIR", tmp_path)
    fs = FactorEngine().compute_factors("tornado_alley", 105)
    result = Classifier().classify(fs)

    snapshot_logger.log_factor_set(fs, _TS)
    snapshot_logger.log_factor_set(fs, _TS)
    snapshot_logger.log_classification(fs, result, _TS)

    factors = _read(tmp_path / "factors")
    assert len(factors) == 2
    assert factors[0]["region_key"] == "tornado_alley"
    assert factors[0]["timestamp"] == _TS.isoformat()
    assert factors[0]["catalyst"] == round(fs.catalyst, 4)

    [record] = _read(tmp_path / "classifications")
    assert record["primary"] == result.primary
    assert record["source"] == "computed"
    assert len(record["candidates"]) == len(result.candidates)


def test_missing_values_logged_as_null(tmp_path, monkeypatch):
    monkeypatch.setattr(snapshot_logger, "_BASE_DIR", tmp_path)
    obs = ObservationSet(temperature_c=20.0, fetched_at=_TS, sources_ok={"surface": True})
    snapshot_logger.log_observations(obs, _TS)

    [record] = _read(tmp_path / "observations")
    assert record["temperature_c"] == 20.0
    assert record["cape"] is None
    assert record["sources_ok"] == {"surface": True}
