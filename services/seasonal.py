"""
Seasonal sweeps over the factor engine: full-year runs, monthly tables,
peak days and multi-day classification outlooks.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta

import numpy as np

import config
from models.classification import ClassificationResult
from models.factors import FactorSet
from models.region import Region
from services.classifier import Classifier
from services.factor_engine import FactorEngine, day_of_year
from services.region_catalog import RegionNotFoundError

logger = logging.getLogger("stormcast.seasonal")

# Mid-month day of year (non-leap)
MONTH_MID_DAYS = [15, 46, 74, 105, 135, 166, 196, 227, 258, 288, 319, 349]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def catalyst_curve(days: np.ndarray | list[float]) -> np.ndarray:
    """Vectorised |cos| catalyst over an array of days of year."""
    d = np.asarray(days, dtype=np.float64)
    return np.abs(np.cos(2.0 * np.pi * (d - config.CATALYST_PHASE_DAY) / config.DAYS_PER_YEAR))


def sweep_year(
    engine: FactorEngine,
    region: Region | str,
    climate_offset: float = 0.0,
    days: int = 366,
) -> list[FactorSet]:
    """Factor sets for days 1..*days*."""
    return [engine.compute_factors(region, d, climate_offset) for d in range(1, days + 1)]


def series(factor_sets: list[FactorSet], name: str) -> np.ndarray:
    """Pull one field out of a sweep as a float array (None → NaN)."""
    values = [getattr(fs, name) for fs in factor_sets]
    return np.array([np.nan if v is None else v for v in values], dtype=np.float64)


def peak_day(factor_sets: list[FactorSet], name: str = "danger") -> tuple[int, float]:
    """(day_of_year, value) at the maximum of *name* across a sweep."""
    values = series(factor_sets, name)
    idx = int(np.nanargmax(values))
    return factor_sets[idx].day_of_year, float(values[idx])


def monthly_danger_table(
    engine: FactorEngine,
    keys: list[str],
    climate_offset: float = 0.0,
) -> tuple[dict[str, np.ndarray], list[str]]:
    """
    Danger index at each mid-month day for every region key.

    Unknown keys are logged and returned separately.
    """
    table: dict[str, np.ndarray] = {}
    missing: list[str] = []
    for key in keys:
        try:
            rows = [engine.compute_factors(key, d, climate_offset) for d in MONTH_MID_DAYS]
        except RegionNotFoundError:
            logger.warning("Skipping unknown region %r", key)
            missing.append(key)
            continue
        table[key] = series(rows, "danger")
    return table, missing


def peak_month(row: np.ndarray) -> str:
    return MONTH_NAMES[int(np.nanargmax(row))]


def days_to_next_equinox(day: int) -> int:
    if day < config.SPRING_EQUINOX_DAY:
        return config.SPRING_EQUINOX_DAY - day
    if day < config.FALL_EQUINOX_DAY:
        return config.FALL_EQUINOX_DAY - day
    return (365 - day) + config.SPRING_EQUINOX_DAY


def days_to_next_solstice(day: int) -> int:
    if day < config.SUMMER_SOLSTICE_DAY:
        return config.SUMMER_SOLSTICE_DAY - day
    if day < config.WINTER_SOLSTICE_DAY:
        return config.WINTER_SOLSTICE_DAY - day
    return (365 - day) + config.SUMMER_SOLSTICE_DAY


def catalyst_phase(day: int) -> str:
    if config.SPRING_EQUINOX_DAY <= day < config.SUMMER_SOLSTICE_DAY:
        return "Post-spring equinox (declining)"
    if config.SUMMER_SOLSTICE_DAY <= day < config.FALL_EQUINOX_DAY:
        return "Summer solstice minimum"
    if config.FALL_EQUINOX_DAY <= day < config.WINTER_SOLSTICE_DAY:
        return "Post-fall equinox (declining)"
    return "Winter solstice minimum"


def forecast_range(
    engine: FactorEngine,
    classifier: Classifier,
    region: Region | str,
    start: date,
    days: int = 7,
    climate_offset: float = 0.0,
) -> list[tuple[date, FactorSet, ClassificationResult]]:
    """Classify each calendar day from *start* for *days* days."""
    outlook = []
    for i in range(days):
        d = start + timedelta(days=i)
        fs = engine.compute_factors(region, day_of_year(d), climate_offset)
        outlook.append((d, fs, classifier.classify(fs)))
    return outlook
