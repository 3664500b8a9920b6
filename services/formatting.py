"""
Presentation helpers: text for factor sets, observations and classifications.

This is the only place a missing value turns into the "NO DATA" sentinel;
everything upstream carries None.
"""
from __future__ import annotations

import math
from typing import Any

from models.classification import ClassificationResult
from models.factors import FactorSet
from services.observed_factors import KMH_TO_KNOTS

NO_DATA = "NO DATA"
TREND_TOLERANCE = 0.01

_CARDINALS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def format_value(value: float | None, decimals: int = 2, unit: str = "") -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return NO_DATA
    return f"{value:.{decimals}f}{unit}"


def format_percent(value: float | None) -> str:
    if value is None:
        return NO_DATA
    return f"{value * 100:.0f}%"


def trend_direction(current: float | None, previous: float | None) -> str:
    """
    Arrow for the change from *previous* to *current*.

    "—" when the current value is missing, "→" with no previous value or a
    change under the tolerance.
    """
    if current is None:
        return "—"
    if previous is None:
        return "→"
    delta = current - previous
    if abs(delta) < TREND_TOLERANCE:
        return "→"
    return "↑" if delta > 0 else "↓"


def degrees_to_cardinal(degrees: float | None) -> str:
    if degrees is None:
        return "N/A"
    return _CARDINALS[int(round(degrees / 22.5)) % 16]


# ── Factor interpretation ─────────────────────────────────────────────────────


def interpret_fuel(v: float) -> str:
    if v > 0.85:
        return "EXTREME - Maximum energy storage"
    if v > 0.70:
        return "HIGH - Strong fuel availability"
    if v > 0.50:
        return "MODERATE - Adequate fuel"
    if v > 0.30:
        return "LOW - Limited fuel access"
    return "MINIMAL - Far from energy source"


def interpret_gradient(v: float) -> str:
    if v > 0.85:
        return "EXTREME - Sharp air mass boundary"
    if v > 0.70:
        return "HIGH - Strong gradient (wall effect)"
    if v > 0.50:
        return "MODERATE - Notable gradient"
    if v > 0.30:
        return "LOW - Weak boundary"
    return "MINIMAL - Homogeneous air mass"


def interpret_catalyst(v: float) -> str:
    if v > 0.85:
        return "MAXIMUM - Near equinox (peak instability)"
    if v > 0.60:
        return "HIGH - Strong tilt rate"
    if v > 0.40:
        return "MODERATE - Transitional"
    if v > 0.20:
        return "LOW - Approaching solstice"
    return "MINIMUM - Near solstice (stable)"


def interpret_solar(v: float) -> str:
    if v > 0.80:
        return "MAXIMUM - Direct solar input"
    if v > 0.60:
        return "HIGH - Strong solar punch"
    if v > 0.40:
        return "MODERATE - Adequate heating"
    if v > 0.20:
        return "LOW - Weak solar input"
    return "MINIMAL - Oblique angle"


def describe_discharge(inversion_ratio: float | None) -> str:
    if inversion_ratio is None:
        return NO_DATA
    if inversion_ratio > 1.2:
        return "HORIZONTAL discharge mode (cyclonic)"
    if inversion_ratio > 1.0:
        return "Transitional mode"
    return "VERTICAL discharge mode (convective)"


def _interpret(value: float | None, fn) -> str:
    return NO_DATA if value is None else fn(value)


# ── Observation modifiers ─────────────────────────────────────────────────────


def humidity_modifier(dewpoint_c: float | None, relative_humidity: float | None) -> str:
    if dewpoint_c is None or relative_humidity is None:
        return f"{NO_DATA} - Cannot assess"
    if dewpoint_c > 18 and relative_humidity > 70:
        return "High moisture - fuel enhanced 20-30%"
    if dewpoint_c > 12 and relative_humidity > 50:
        return "Moderate moisture - baseline fuel"
    if dewpoint_c < 8:
        return "Low moisture - fuel reduced 15-25%"
    return "Transitional - marginal fuel availability"


def cape_modifier(cape: float | None, cin: float | None) -> str:
    if cape is None:
        return f"{NO_DATA} - Cannot assess instability"
    if cape > 2500:
        if cin is not None and cin < -50:
            return f"Extreme CAPE ({cape:.0f}) but capped - explosive if cap breaks"
        return f"Extreme CAPE ({cape:.0f}) - significant severe potential"
    if cape > 1500:
        return f"Strong CAPE ({cape:.0f}) - organized storms likely"
    if cape > 500:
        return f"Moderate CAPE ({cape:.0f}) - convection possible"
    return f"Weak CAPE ({cape:.0f}) - limited storm potential"


def shear_modifier(shear_kmh: float | None) -> str:
    if shear_kmh is None:
        return f"{NO_DATA} - Cannot assess shear"
    knots = shear_kmh * KMH_TO_KNOTS
    if knots > 15:
        return f"Strong low-level shear ({knots:.0f} kt) - rotation favoured"
    if knots > 10:
        return f"Moderate low-level shear ({knots:.0f} kt) - organized storms"
    if knots > 5:
        return f"Weak shear ({knots:.0f} kt) - pulse storms only"
    return f"Minimal shear ({knots:.0f} kt)"


def lapse_rate_modifier(rate: float | None) -> str:
    if rate is None:
        return f"{NO_DATA} - Cannot assess stability"
    if rate > 9.8:
        return f"Absolutely unstable ({rate:.1f}°C/km) - explosive convection"
    if rate > 7.0:
        return f"Steep lapse rate ({rate:.1f}°C/km) - strong instability"
    if rate > 5.5:
        return f"Near moist-adiabatic ({rate:.1f}°C/km) - conditionally unstable"
    if rate > 4.0:
        return f"Stable ({rate:.1f}°C/km) - convection inhibited"
    return f"Strong inversion ({rate:.1f}°C/km) - capped atmosphere"


def fuel_modifier(fuel: float | None, gulf_sst_c: float | None) -> str:
    if fuel is None:
        return f"{NO_DATA} - Cannot calculate fuel"
    if gulf_sst_c is None:
        return "Gulf SST unavailable - partial calculation"
    pct = f"{fuel * 100:.0f}%"
    if fuel > 0.8:
        return f"High fuel ({pct}) - Gulf {gulf_sst_c:.1f}°C - energy-rich environment"
    if fuel > 0.5:
        return f"Moderate fuel ({pct}) - Gulf {gulf_sst_c:.1f}°C - adequate energy"
    return f"Low fuel ({pct}) - Gulf {gulf_sst_c:.1f}°C - limited potential"


def front_approach(wind_direction_deg: float | None, pressure_departure: float | None) -> str:
    if wind_direction_deg is None or pressure_departure is None:
        return NO_DATA
    if pressure_departure < -2:
        if 180 < wind_direction_deg < 270:
            return "SW approach - classic warm sector"
        if wind_direction_deg > 270 or wind_direction_deg < 45:
            return "NW approach - cold front passage"
        return "Unusual approach vector"
    if pressure_departure > 2:
        return "High pressure building - stable"
    return "Weak or no frontal boundary"


def front_angle_modifier(angle: float | None, pressure_departure: float | None) -> str:
    if angle is None or pressure_departure is None:
        return NO_DATA
    if pressure_departure < -3 and angle < 30:
        return "Near-perpendicular approach - maximum gradient forcing"
    if pressure_departure < -2:
        return "Active frontal passage - enhanced dynamics"
    return "Minimal frontal modification"


# ── Classification text ───────────────────────────────────────────────────────

_REGIME_TEXT = {
    "COLD": "Cold conditions",
    "COOL": "Cool temperatures",
    "MILD": "Mild temperatures",
    "WARM": "Warm conditions",
    "HOT": "Hot temperatures",
}

_CONDITION_TEXT = {
    "TORNADO": "Tornado risk - seek shelter if warnings issued",
    "SUPERCELL": "Supercell thunderstorms possible - stay weather aware",
    "SEVERE_TSTORM": "Severe thunderstorms possible - damaging winds and large hail",
    "DERECHO": "Derecho possible - widespread damaging winds",
    "BOMB_CYCLONE": "Rapidly intensifying storm system - high winds and heavy precipitation",
    "BLIZZARD": "Blizzard conditions - heavy snow, high winds, low visibility",
    "ICE_STORM": "Ice storm - significant ice accumulation expected",
    "WINTER_STORM": "Winter storm - accumulating snow and difficult travel",
    "HIGH_WIND": "High winds expected - secure loose objects",
    "THUNDERSTORM": "Thunderstorms expected",
    "FREEZING_RAIN": "Freezing rain possible - hazardous travel",
    "SNOW": "Snow expected",
    "WINTER_MIX": "Wintry mix of precipitation",
    "SHOWERS": "Scattered showers",
    "RAIN": "Rain expected",
    "DRIZZLE": "Light drizzle",
    "FOG": "Foggy conditions - reduced visibility",
    "CLOUDY": "Cloudy skies",
    "PARTLY_CLOUDY": "Partly cloudy",
    "FAIR": "Fair weather",
}


def generate_forecast(
    factors: FactorSet,
    result: ClassificationResult,
    secondary_severity: int | None = None,
) -> str:
    """
    One- or two-sentence forecast text.

    A milder secondary type is mentioned when the primary is below severity
    5 and the secondary is within two severity steps of it.
    """
    regime = _REGIME_TEXT.get(result.temperature_regime or "", "Temperature regime unavailable")
    text = f"{regime}. {_CONDITION_TEXT.get(result.primary, result.primary)}."

    if result.secondary and result.severity < 5:
        if secondary_severity is None:
            secondary_severity = next(
                (c.severity for c in result.candidates if c.type == result.secondary), None
            )
        if secondary_severity is not None and secondary_severity >= result.severity - 2:
            text += f" {result.secondary.replace('_', ' ').lower()} also possible."

    if result.severity >= 7:
        text += (
            f" [Catalyst: {format_percent(factors.catalyst)},"
            f" Gradient: {format_percent(factors.gradient)}]"
        )
    return text


def explain_classification(factors: FactorSet, result: ClassificationResult) -> dict[str, Any]:
    """Breakdown of the factors behind a classification, for reports."""

    def pct(v: float | None) -> str:
        return NO_DATA if v is None else f"{v * 100:.1f}%"

    return {
        "prediction": result.primary,
        "temperature_regime": result.temperature_regime,
        "regime_override": result.regime_override,
        "factor_analysis": {
            "catalyst": {"value": pct(factors.catalyst), "interpretation": _interpret(factors.catalyst, interpret_catalyst)},
            "gradient": {"value": pct(factors.gradient), "interpretation": _interpret(factors.gradient, interpret_gradient)},
            "fuel": {"value": pct(factors.fuel), "interpretation": _interpret(factors.fuel, interpret_fuel)},
            "solar_angle": {"value": pct(factors.solar_angle), "interpretation": _interpret(factors.solar_angle, interpret_solar)},
            "inversion_ratio": {
                "value": format_value(factors.inversion_ratio),
                "interpretation": describe_discharge(factors.inversion_ratio),
            },
        },
        "alternatives": [
            {"type": c.type, "score": round(c.score, 3), "severity": c.severity}
            for c in result.candidates
        ],
    }
