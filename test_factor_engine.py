#!/usr/bin/env python3
"""
STORMCAST — factor engine tests.
Pure arithmetic; no network.
"""
import math

import pytest

from models.observation import ObservationSet
from models.region import Region
from services.factor_engine import (
    EngineSettings,
    FactorEngine,
    day_of_year,
    risk_level,
    tornado_scale,
)
from services.region_catalog import RegionNotFoundError, get_region

engine = FactorEngine(EngineSettings(fuel_model="distance_decay", catalyst_normalization="cosine"))


# ═══════════════════════════════════════════════════════════════════════════════
# 1. Catalyst
# ═══════════════════════════════════════════════════════════════════════════════


def test_catalyst_peaks_at_equinoxes():
    assert engine.catalyst(80) == pytest.approx(1.0, abs=1e-9)
    assert engine.catalyst(266) == pytest.approx(1.0, abs=1e-2), f"got {engine.catalyst(266)}"


def test_catalyst_troughs_at_solstices():
    # day 172 / 355 sit a fraction of a day off the exact zero crossing
    assert engine.catalyst(172) < 0.02, f"got {engine.catalyst(172)}"
    assert engine.catalyst(355) < 0.02, f"got {engine.catalyst(355)}"


def test_catalyst_bounded_all_year():
    for d in range(1, 367):
        c = engine.catalyst(d)
        assert 0.0 <= c <= 1.0, f"catalyst({d}) = {c}"


def test_derivative_normalization_close_to_cosine():
    deriv = FactorEngine(EngineSettings(catalyst_normalization="derivative"))
    for d in (1, 45, 80, 105, 172, 200, 266, 319, 355):
        a, b = engine.catalyst(d), deriv.catalyst(d)
        assert abs(a - b) < 0.01, f"day {d}: cosine={a} derivative={b}"
        assert 0.0 <= b <= 1.0


# ═══════════════════════════════════════════════════════════════════════════════
# 2. Solar angle
# ═══════════════════════════════════════════════════════════════════════════════


def test_solar_angle_bounded():
    for lat in range(-66, 67, 6):
        for d in range(1, 366, 15):
            s = engine.solar_angle(lat, d)
            assert s is not None and 0.0 <= s <= 1.0, f"solar({lat}, {d}) = {s}"


def test_solar_angle_clamps_polar_night():
    # Deep arctic winter: noon sun below the horizon
    assert engine.solar_angle(85.0, 355) == 0.0


def test_solar_angle_rejects_bad_latitude():
    with pytest.raises(ValueError):
        engine.solar_angle(91.0, 100)


def test_region_rejects_bad_latitude():
    with pytest.raises(ValueError):
        Region("bad", "Bad", 95.0, 100.0, 0.5)


# ═══════════════════════════════════════════════════════════════════════════════
# 3. Fuel and gradient
# ═══════════════════════════════════════════════════════════════════════════════


def test_zero_distance_fuel_only_bounded_by_sst():
    coast = Region("coast", "Coast", 29.0, 0.0, 0.6)
    for d in (15, 105, 200, 300):
        sst_norm = (engine.gulf_sst(d) - 20.0) / 12.0
        expected = max(0.0, min(1.0, sst_norm * 1.5))
        assert engine.fuel(coast, d) == pytest.approx(expected), f"day {d}"


def test_fuel_increases_with_climate_offset():
    region = get_region("tornado_alley")
    values = [engine.fuel(region, 105, off) for off in (0.0, 0.5, 1.0, 2.0)]
    assert all(a < b for a, b in zip(values, values[1:])), f"fuel not increasing: {values}"


def test_gradient_decreases_with_climate_offset():
    region = get_region("tornado_alley")
    values = [engine.gradient(region, 105, off) for off in (0.0, 0.5, 1.0, 2.0)]
    assert all(a > b for a, b in zip(values, values[1:])), f"gradient not decreasing: {values}"


def test_gradient_without_damping_ignores_offset():
    flat = FactorEngine(EngineSettings(arctic_damping=0.0))
    region = get_region("midwest")
    assert flat.gradient(region, 100, 0.0) == flat.gradient(region, 100, 3.0)


def test_gradient_spring_peak_beats_fall():
    region = get_region("tornado_alley")
    assert engine.gradient(region, 100) > engine.gradient(region, 290) > engine.gradient(region, 200)


def test_scalar_lookup_uses_region_scalars():
    scalar = FactorEngine(EngineSettings(fuel_model="scalar_lookup"))
    region = Region("t", "T", 36.0, 20.0, 1.0, base_fuel=0.8, base_gradient=1.0)
    # 0.8 · (1 + 1.0 · (27 − 26 + 0) · 0.1) = 0.88
    assert scalar.fuel(region, 105) == pytest.approx(0.88)
    assert scalar.fuel(region, 105, 1.0) == pytest.approx(0.96)
    # 1.0 · (1 − 0.3 · 1.0 · 0.1) = 0.97
    assert scalar.gradient(region, 105, 1.0) == pytest.approx(0.97)


def test_unknown_setting_rejected():
    with pytest.raises(ValueError):
        EngineSettings(fuel_model="tidal")
    with pytest.raises(ValueError):
        EngineSettings(catalyst_normalization="sine")


# ═══════════════════════════════════════════════════════════════════════════════
# 4. Inversion and derived indices
# ═══════════════════════════════════════════════════════════════════════════════


def test_inversion_ratio_epsilon():
    ratio = FactorEngine.inversion_ratio(1.0, 0.0)
    assert ratio == pytest.approx(10.0)
    assert FactorEngine.discharge_mode(ratio) == "HORIZONTAL"


def test_discharge_mode_bands():
    assert FactorEngine.discharge_mode(1.1) == "TRANSITIONAL"
    assert FactorEngine.discharge_mode(1.0) == "VERTICAL"
    assert FactorEngine.discharge_mode(0.3) == "VERTICAL"


def test_derived_indices_match_products():
    fs = engine.compute_factors("dixie_alley", 75)
    assert fs.probability == pytest.approx(fs.fuel * fs.catalyst * fs.solar_angle)
    assert fs.volatility == pytest.approx(fs.gradient * fs.catalyst * fs.solar_angle)
    assert fs.danger == pytest.approx(fs.fuel * fs.gradient * fs.catalyst ** 2 * fs.solar_angle ** 2)
    assert 0.0 <= fs.danger <= 1.0


# ═══════════════════════════════════════════════════════════════════════════════
# 5. Scenarios
# ═══════════════════════════════════════════════════════════════════════════════


def test_tornado_alley_mid_april():
    fs = engine.compute_factors("tornado_alley", 105)
    assert fs.catalyst > 0.85, f"catalyst {fs.catalyst}"
    assert 0.7 <= fs.solar_angle <= 0.95, f"solar {fs.solar_angle}"
    assert fs.discharge_mode == "VERTICAL"
    assert fs.source == "computed"
    assert fs.gulf_sst is not None


def test_solstice_danger_collapse():
    april = engine.compute_factors("tornado_alley", 105)
    june = engine.compute_factors("tornado_alley", 172)
    assert june.catalyst < 0.05
    assert june.danger <= 0.2 * april.danger, f"april {april.danger} june {june.danger}"
    # fuel is still near its seasonal high in June
    assert june.fuel > 0.6, f"june fuel {june.fuel}"
    assert abs(june.fuel - april.fuel) < 0.05


def test_november_inversion_window():
    ratios = {
        key: engine.compute_factors(key, 319).inversion_ratio
        for key in ("tornado_alley", "midwest", "northeast", "great_lakes", "northern_plains")
    }
    assert any(r > 1.0 for r in ratios.values()), f"no inversion: {ratios}"
    assert ratios["northern_plains"] > 1.0


def test_unknown_region_raises():
    with pytest.raises(RegionNotFoundError):
        engine.compute_factors("atlantis", 100)


def test_compare_regions_skips_bad_keys():
    results, missing = engine.compare_regions(105, keys=["tornado_alley", "atlantis", "midwest"])
    assert set(results) == {"tornado_alley", "midwest"}
    assert missing == ["atlantis"]


def test_compare_regions_defaults_to_catalog():
    results, missing = engine.compare_regions(200)
    assert "little_rock" in results and not missing


# ═══════════════════════════════════════════════════════════════════════════════
# 6. Observed source
# ═══════════════════════════════════════════════════════════════════════════════


def test_observed_factors_full():
    obs = ObservationSet(gulf_sst_c=27.0, relative_humidity=80.0, pressure_mb=1003.25, wind_speed_kmh=25.0)
    fs = engine.compute_observed_factors("little_rock", 105, obs)
    assert fs.source == "observed"
    # 0.7 · 0.7 + 0.3 · 0.8 = 0.73
    assert fs.fuel == pytest.approx(0.73)
    # 10/20 + 25/50 = 1.0
    assert fs.gradient == pytest.approx(1.0)
    assert fs.danger is not None
    assert fs.catalyst == pytest.approx(engine.catalyst(105))


def test_observed_factors_missing_data_stays_none():
    obs = ObservationSet(relative_humidity=80.0)
    fs = engine.compute_observed_factors("little_rock", 105, obs)
    assert fs.fuel is None and fs.gradient is None
    assert fs.probability is None and fs.volatility is None and fs.danger is None
    # geometry is always available
    assert fs.catalyst is not None and fs.solar_angle is not None
    assert fs.inversion_ratio is not None
    assert not fs.is_complete


def test_observed_nan_treated_as_missing():
    obs = ObservationSet(gulf_sst_c=float("nan"), relative_humidity=70.0)
    fs = engine.compute_observed_factors("little_rock", 105, obs)
    assert fs.fuel is None
    assert fs.gulf_sst is None


# ═══════════════════════════════════════════════════════════════════════════════
# 7. Labels
# ═══════════════════════════════════════════════════════════════════════════════


def test_risk_levels():
    assert risk_level(0.2) == (5, "EXTREME")
    assert risk_level(0.1) == (4, "HIGH")
    assert risk_level(0.05) == (3, "MODERATE")
    assert risk_level(0.03) == (2, "LOW")
    assert risk_level(0.0) == (1, "MINIMAL")


def test_tornado_scale():
    assert tornado_scale(0.95) == "EF5"
    assert tornado_scale(0.7) == "EF3"
    assert tornado_scale(0.1) == "EF0"


def test_day_of_year():
    from datetime import date

    assert day_of_year(date(2025, 1, 1)) == 1
    assert day_of_year(date(2025, 4, 15)) == 105
    assert not math.isnan(engine.catalyst(day_of_year(date(2024, 12, 31))))


def test_solar_punch():
    punch = engine.solar_punch(35.5, 105)
    assert punch == pytest.approx(engine.solar_angle(35.5, 105) * engine.catalyst(105))
    # no punch at the solstice even with a high sun
    assert engine.solar_punch(35.5, 172) < 0.02
    assert engine.solar_punch(85.0, 355) == 0.0
