#!/usr/bin/env python3
"""
STORMCAST — region catalog tests.
"""
import math

import pytest

from services.factor_engine import EngineSettings, FactorEngine
from services.region_catalog import (
    REGIONS,
    SCALAR_REGIONS,
    ZERO_DISTANCE_FUEL,
    RegionNotFoundError,
    distance_for_fuel,
    get_region,
    gradient_zone_for_latitude,
    gulf_distance_km,
    list_regions,
    region_from_coordinates,
    region_from_scalars,
    scalar_fuel,
    scalar_gradient,
    scalar_region,
)


def test_catalog_contents():
    keys = list_regions()
    for key in ("benton_ar", "little_rock", "haskell_ar", "tornado_alley", "dixie_alley"):
        assert key in keys, f"missing {key}"
    ta = get_region("tornado_alley")
    assert ta.latitude == 35.5
    assert ta.gulf_distance_km == 800.0
    assert ta.gradient_zone == 1.0


def test_every_region_valid():
    for key, region in REGIONS.items():
        assert region.key == key
        assert -90 <= region.latitude <= 90
        assert region.gulf_distance_km >= 0
        assert 0 <= region.gradient_zone <= 1


def test_unknown_region():
    with pytest.raises(RegionNotFoundError) as info:
        get_region("atlantis")
    assert info.value.key == "atlantis"
    assert "atlantis" in str(info.value)
    # still a KeyError for callers that catch the builtin
    with pytest.raises(KeyError):
        get_region("atlantis")


def test_zero_distance_fuel_constant():
    assert ZERO_DISTANCE_FUEL == pytest.approx(1.5 * 6.5 / 12.0)


def test_distance_for_fuel_inverts_decay():
    for fuel in (0.2, 0.45, 0.7):
        d = distance_for_fuel(fuel)
        assert ZERO_DISTANCE_FUEL * math.exp(-d / 1500.0) == pytest.approx(fuel)
    assert distance_for_fuel(1.0) == 0.0
    assert distance_for_fuel(0.0) > 10000


def test_region_from_scalars_roundtrips_fuel():
    r = region_from_scalars("np", "Northern Plains", 45.0, fuel=0.45, gradient=0.5)
    assert r.base_fuel == 0.45 and r.base_gradient == 0.5
    assert r.gradient_zone == 0.5
    assert r.gulf_distance_km > 0
    assert scalar_fuel(r) == 0.45
    assert scalar_gradient(r) == 0.5


def test_scalar_mapping_for_distance_regions():
    r = get_region("tornado_alley")
    assert scalar_fuel(r) == pytest.approx(ZERO_DISTANCE_FUEL * math.exp(-800 / 1500))
    assert scalar_gradient(r) == r.gradient_zone


def test_scalar_region_table():
    r = scalar_region("gulf_coast")
    assert r.base_fuel == SCALAR_REGIONS["gulf_coast"]["fuel"]
    assert r.gulf_distance_km == 0.0  # fuel 1.0 is above the zero-distance fuel
    with pytest.raises(RegionNotFoundError):
        scalar_region("little_rock")


def test_scalar_region_in_scalar_engine():
    engine = FactorEngine(EngineSettings(fuel_model="scalar_lookup"))
    fs = engine.compute_factors(scalar_region("tornado_alley"), 105)
    assert fs.fuel == pytest.approx(0.88)
    assert fs.gradient == pytest.approx(1.0)


def test_gulf_distance():
    assert gulf_distance_km(25.0, -90.0) == 0.0
    # one degree north
    assert gulf_distance_km(26.0, -90.0) == pytest.approx(111.0)


def test_gradient_zone_bands():
    assert gradient_zone_for_latitude(35.0) == 1.0
    assert gradient_zone_for_latitude(31.0) == 0.85
    assert gradient_zone_for_latitude(45.0) == 0.75
    assert gradient_zone_for_latitude(27.0) == 0.6
    assert gradient_zone_for_latitude(60.0) == 0.4


def test_region_from_coordinates():
    r = region_from_coordinates(34.75, -92.29)
    assert r.gradient_zone == 1.0
    assert 900 < r.gulf_distance_km < 1200
    assert "N" in r.name and "W" in r.name
    fs = FactorEngine().compute_factors(r, 105)
    assert fs.region_key == r.key
