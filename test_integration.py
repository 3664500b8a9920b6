#!/usr/bin/env python3
"""
STORMCAST — Integration test.

Runs the one-shot pipeline with a mocked observation fetch:
  modelled factors → live observations → observed factors → classify → write logs.
"""
import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import main
from models.observation import ObservationSet
from services import logger as log_service
from services.observation_adapter import ObservationAdapter, build_observation_set

_OBSERVATIONS = build_observation_set(
    {
        "temperature_c": 26.0,
        "dewpoint_c": 20.0,
        "relative_humidity": 78.0,
        "wind_speed_kmh": 30.0,
        "wind_direction_deg": 200.0,
        "pressure_mb": 1004.0,
        "timestamp": "2025-04-15T18:00:00+00:00",
    },
    {"cape": 2200.0, "cin": -30.0, "temperature_c": 26.0, "wind_speed_kmh": 30.0, "wind_direction_deg": 200.0},
    {"primary": 25.5, "average": 25.0, "readings": {"NE Gulf": 25.5}},
    station="KLIT",
)


def _records(root, kind):
    lines = []
    for path in sorted((root / kind).glob("*.jsonl")):
        lines.extend(json.loads(line) for line in path.read_text().splitlines())
    return lines


def test_pipeline_writes_both_sources(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(log_service, "_BASE_DIR", tmp_path)
    with patch.object(ObservationAdapter, "fetch", AsyncMock(return_value=_OBSERVATIONS)):
        code = asyncio.run(main.main())
    assert code == 0

    factors = _records(tmp_path, "factors")
    assert [r["source"] for r in factors] == ["computed", "observed"]
    observed = factors[1]
    assert observed["fuel"] is not None and observed["gradient"] is not None

    classifications = _records(tmp_path, "classifications")
    assert len(classifications) == 2
    assert all(r["primary"] for r in classifications)

    [obs] = _records(tmp_path, "observations")
    assert obs["station"] == "KLIT"
    assert obs["cape"] == 2200.0

    out = capsys.readouterr().out
    assert "STORMCAST" in out
    assert "Storm risk:" in out


def test_pipeline_without_any_source(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(log_service, "_BASE_DIR", tmp_path)
    empty = ObservationSet(
        fetched_at=datetime.now(timezone.utc),
        sources_ok={"surface": False, "atmospheric": False, "sst": False},
    )
    with patch.object(ObservationAdapter, "fetch", AsyncMock(return_value=empty)):
        code = asyncio.run(main.main())
    assert code == 1

    observed = _records(tmp_path, "factors")[1]
    assert observed["fuel"] is None and observed["danger"] is None
    out = capsys.readouterr().out
    assert "NO DATA" in out
