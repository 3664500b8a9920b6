#!/usr/bin/env python3
"""
STORMCAST — presentation helper tests.
"""
from models.classification import Candidate, ClassificationResult
from models.factors import FactorSet
from services import formatting
from services.classifier import Classifier
from services.factor_engine import FactorEngine


def test_format_value():
    assert formatting.format_value(None) == "NO DATA"
    assert formatting.format_value(float("nan")) == "NO DATA"
    assert formatting.format_value(1.23456, 3) == "1.235"
    assert formatting.format_value(21.04, 1, "°C") == "21.0°C"


def test_trend_direction_is_pure():
    assert formatting.trend_direction(None, 0.5) == "—"
    assert formatting.trend_direction(0.5, None) == "→"
    assert formatting.trend_direction(0.505, 0.5) == "→"
    assert formatting.trend_direction(0.6, 0.5) == "↑"
    assert formatting.trend_direction(0.4, 0.5) == "↓"
    # same inputs, same answer
    assert formatting.trend_direction(0.6, 0.5) == "↑"


def test_degrees_to_cardinal():
    assert formatting.degrees_to_cardinal(0) == "N"
    assert formatting.degrees_to_cardinal(225) == "SW"
    assert formatting.degrees_to_cardinal(350) == "N"
    assert formatting.degrees_to_cardinal(None) == "N/A"


def test_interpretations():
    assert formatting.interpret_catalyst(0.95).startswith("MAXIMUM")
    assert formatting.interpret_fuel(0.1).startswith("MINIMAL")
    assert formatting.interpret_gradient(0.75).startswith("HIGH")
    assert formatting.interpret_solar(0.5).startswith("MODERATE")
    assert formatting.describe_discharge(None) == "NO DATA"
    assert formatting.describe_discharge(1.5).startswith("HORIZONTAL")


def test_modifiers_report_missing_data():
    assert formatting.humidity_modifier(None, 50).startswith("NO DATA")
    assert formatting.cape_modifier(None, None).startswith("NO DATA")
    assert formatting.shear_modifier(None).startswith("NO DATA")
    assert formatting.lapse_rate_modifier(None).startswith("NO DATA")
    assert formatting.fuel_modifier(None, 27.0).startswith("NO DATA")
    assert formatting.front_approach(None, -3.0) == "NO DATA"
    assert formatting.front_angle_modifier(10.0, None) == "NO DATA"


def test_modifiers_with_data():
    assert formatting.humidity_modifier(20, 80).startswith("High moisture")
    assert "capped" in formatting.cape_modifier(3000, -80)
    assert formatting.cape_modifier(800, None).startswith("Moderate CAPE (800)")
    assert formatting.lapse_rate_modifier(8.0).startswith("Steep")
    assert "Gulf 28.0°C" in formatting.fuel_modifier(0.9, 28.0)
    assert formatting.front_approach(225, -3.0).startswith("SW approach")
    assert formatting.front_angle_modifier(10.0, -4.0).startswith("Near-perpendicular")


def test_generate_forecast_severe_has_mechanism():
    fs = FactorEngine().compute_factors("tornado_alley", 105)
    result = Classifier().classify(fs)
    text = formatting.generate_forecast(fs, result)
    assert text.startswith("Hot temperatures.")
    assert "Tornado risk" in text
    assert "[Catalyst:" in text


def test_generate_forecast_mentions_secondary():
    fs = FactorSet("x", 1, 0.1, 0.5, 0.3, 0.1)
    result = ClassificationResult(
        primary="CLOUDY",
        secondary="PARTLY_CLOUDY",
        confidence=0.6,
        severity=1,
        category="clouds",
        temperature_regime="MILD",
        candidates=[
            Candidate("CLOUDY", 0.6, 1, "clouds"),
            Candidate("PARTLY_CLOUDY", 0.5, 1, "clouds"),
        ],
    )
    text = formatting.generate_forecast(fs, result)
    assert text == "Mild temperatures. Cloudy skies. partly cloudy also possible."


def test_explain_classification():
    fs = FactorEngine().compute_factors("little_rock", 100)
    result = Classifier().classify(fs)
    info = formatting.explain_classification(fs, result)
    assert info["prediction"] == result.primary
    assert set(info["factor_analysis"]) == {"catalyst", "gradient", "fuel", "solar_angle", "inversion_ratio"}
    assert len(info["alternatives"]) == len(result.candidates)


def test_explain_with_missing_factor():
    fs = FactorSet("x", 1, 0.9, 0.5, None, None)
    result = Classifier().classify(fs)
    info = formatting.explain_classification(fs, result)
    assert info["factor_analysis"]["fuel"]["value"] == "NO DATA"
    assert info["factor_analysis"]["fuel"]["interpretation"] == "NO DATA"
