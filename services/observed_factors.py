"""
Observed factor formulas — fuel, gradient and stability indices from live data.

Every function takes independently nullable measurements and returns None
when a required input is missing.  Nothing here substitutes a default for
an absent measurement.
"""
from __future__ import annotations

import math

STANDARD_PRESSURE_MB = 1013.25
KMH_TO_KNOTS = 0.54


def clean(value: float | None) -> float | None:
    """Normalise a raw measurement: None and NaN both mean "missing"."""
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


def observed_fuel(gulf_sst_c: float | None, relative_humidity: float | None) -> float | None:
    """0.7 · SST factor (20 °C → 0, 30 °C → 1) + 0.3 · moisture factor, clamped."""
    sst = clean(gulf_sst_c)
    rh = clean(relative_humidity)
    if sst is None or rh is None:
        return None
    sst_factor = (sst - 20.0) / 10.0
    moisture_factor = rh / 100.0
    return max(0.0, min(1.0, 0.7 * sst_factor + 0.3 * moisture_factor))


def observed_gradient(pressure_mb: float | None, wind_speed_kmh: float | None) -> float | None:
    """Pressure departure from standard plus a wind-driven dynamic term, capped at 1."""
    p = clean(pressure_mb)
    wind = clean(wind_speed_kmh)
    if p is None or wind is None:
        return None
    return min(1.0, abs(p - STANDARD_PRESSURE_MB) / 20.0 + wind / 50.0)


def pressure_departure(pressure_mb: float | None) -> float | None:
    p = clean(pressure_mb)
    if p is None:
        return None
    return p - STANDARD_PRESSURE_MB


def front_angle(wind_direction_deg: float | None) -> float | None:
    """Angle in degrees between the wind and a due-west frontal approach."""
    d = clean(wind_direction_deg)
    if d is None:
        return None
    return abs((d - 270.0 + 540.0) % 360.0 - 180.0)


def heat_transfer_rate(temperature_c: float | None, wind_speed_kmh: float | None) -> float | None:
    """Convective heat-transfer rate (W/m²) against a 15 °C reference surface."""
    t = clean(temperature_c)
    wind = clean(wind_speed_kmh)
    if t is None or wind is None:
        return None
    wind_ms = wind / 3.6
    return (5.7 + 3.8 * wind_ms) * abs(t - 15.0)


def lapse_rate(
    temp_2m: float | None,
    temp_80m: float | None = None,
    temp_120m: float | None = None,
    temp_180m: float | None = None,
) -> tuple[float, float] | None:
    """
    Shallow-layer lapse rate in °C/km from 2 m to the highest available level.

    Returns (lapse_rate, upper_height_m) or None when the surface or every
    upper level is missing.
    """
    surface = clean(temp_2m)
    if surface is None:
        return None
    for height, temp in ((180.0, temp_180m), (120.0, temp_120m), (80.0, temp_80m)):
        upper = clean(temp)
        if upper is not None:
            return (surface - upper) / ((height - 2.0) / 1000.0), height
    return None


def stability_class(rate: float | None) -> str | None:
    if rate is None:
        return None
    if rate > 9.8:
        return "Absolutely Unstable (shallow layer)"
    if rate > 6.5:
        return "Conditionally Unstable"
    if rate > 4.0:
        return "Stable"
    return "Very Stable / Inversion"


def wind_components(speed: float | None, direction_deg: float | None) -> tuple[float, float] | None:
    """Meteorological (from-direction) wind to (u, v) components."""
    s = clean(speed)
    d = clean(direction_deg)
    if s is None or d is None:
        return None
    rad = math.radians(d)
    return -s * math.sin(rad), -s * math.cos(rad)


def bulk_shear(
    surface: tuple[float | None, float | None],
    levels: list[tuple[float, float | None, float | None]],
) -> tuple[float, float] | None:
    """
    Bulk shear magnitude (km/h) between the 10 m wind and the highest level.

    *surface* is (speed, direction); *levels* is a list of
    (height_m, speed, direction).  Returns (shear_kmh, upper_height_m).
    """
    low = wind_components(*surface)
    if low is None:
        return None
    for height, speed, direction in sorted(levels, key=lambda lvl: lvl[0], reverse=True):
        high = wind_components(speed, direction)
        if high is not None:
            return math.hypot(high[0] - low[0], high[1] - low[1]), height
    return None


def shear_class(shear_kmh: float | None) -> str | None:
    """Interpretation of low-level shear, scaled for a shallow layer."""
    if shear_kmh is None:
        return None
    knots = shear_kmh * KMH_TO_KNOTS
    if knots > 15:
        return "Strong low-level shear"
    if knots > 10:
        return "Moderate low-level shear"
    if knots > 5:
        return "Weak shear"
    return "Minimal shear"


def simple_risk(probability: float | None, cape: float | None) -> tuple[str, str] | None:
    """
    Plain-language storm risk from the probability index and CAPE.

    Returns (level, summary).  A missing CAPE only fails the CAPE tests; a
    missing probability means no assessment at all.
    """
    p = clean(probability)
    if p is None:
        return None
    c = clean(cape)
    if p > 0.4 and c is not None and c > 1500:
        return "HIGH", "Significant severe weather potential today"
    if p > 0.25 and c is not None and c > 500:
        return "MODERATE", "Isolated storms possible, some could be strong"
    if p > 0.15 or (c is not None and c > 250):
        return "LOW", "Slight chance of scattered showers/storms"
    return "MINIMAL", "Low severe weather threat"
