"""
Factor Engine — seasonal storm-geometry factors for a region and day.

Four base factors, each normalised to [0, 1]:
  1. catalyst    — magnitude of the seasonal rate of change of solar
                   declination; peaks at the equinoxes, vanishes at solstices
  2. solar angle — sine of the noon solar elevation for the region's latitude
  3. fuel        — Gulf sea-surface-temperature proxy decayed by distance
                   (or a per-region scalar in scalar-lookup mode)
  4. gradient    — spring/fall air-mass-collision bumps scaled by the region's
                   gradient zone, damped by a warming climate offset

Derived indices:
  inversion   = catalyst / (solar + 0.1)   → discharge mode
  probability = fuel · catalyst · solar
  volatility  = gradient · catalyst · solar
  danger      = fuel · gradient · catalyst² · solar²

An "observed" path swaps the modelled fuel and gradient for values computed
from live measurements (see services.observed_factors).
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date

import config
from models.factors import FactorSet
from models.observation import ObservationSet
from models.region import Region
from services import observed_factors
from services.region_catalog import (
    RegionNotFoundError,
    get_region,
    list_regions,
    scalar_fuel,
    scalar_gradient,
)

logger = logging.getLogger("stormcast.factor_engine")

FUEL_MODELS = ("distance_decay", "scalar_lookup")
CATALYST_NORMALIZATIONS = ("cosine", "derivative")

_TWO_PI = 2.0 * math.pi


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def day_of_year(d: date) -> int:
    return d.timetuple().tm_yday


@dataclass
class EngineSettings:
    """Selects among the variant formulas; one engine serves every mode."""

    fuel_model: str = field(default_factory=lambda: config.FUEL_MODEL)
    catalyst_normalization: str = field(default_factory=lambda: config.CATALYST_NORMALIZATION)
    arctic_damping: float = config.ARCTIC_DAMPING

    def __post_init__(self) -> None:
        if self.fuel_model not in FUEL_MODELS:
            raise ValueError(f"unknown fuel model {self.fuel_model!r}, expected one of {FUEL_MODELS}")
        if self.catalyst_normalization not in CATALYST_NORMALIZATIONS:
            raise ValueError(
                f"unknown catalyst normalization {self.catalyst_normalization!r}, "
                f"expected one of {CATALYST_NORMALIZATIONS}"
            )
        if self.arctic_damping < 0:
            raise ValueError("arctic_damping must be >= 0")


class FactorEngine:
    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()

    # ── Base factors ──────────────────────────────────────────────────────────

    def catalyst(self, day: float) -> float:
        """Normalised |d(declination)/dt|; 1.0 at the equinoxes, 0.0 at the solstices."""
        phase = _TWO_PI * (day - config.CATALYST_PHASE_DAY) / config.DAYS_PER_YEAR
        if self.settings.catalyst_normalization == "derivative":
            raw = (
                config.TILT_DERIVATIVE_AMPLITUDE_DEG
                * (_TWO_PI / config.DAYS_PER_YEAR)
                * math.cos(phase)
            )
            return _clamp01(abs(raw) / config.TILT_DERIVATIVE_NORMALIZER)
        return abs(math.cos(phase))

    @staticmethod
    def declination(day: float) -> float:
        """Solar declination in degrees."""
        return config.AXIAL_TILT_DEG * math.sin(
            _TWO_PI * (day - config.DECLINATION_PHASE_DAY) / config.DAYS_PER_YEAR
        )

    def solar_angle(self, latitude: float, day: float) -> float | None:
        """
        Sine of the noon solar elevation, clamped to [0, 1].

        Polar night (negative elevation) clamps to 0.  Returns None if the
        computation degenerates to NaN.
        """
        if not -90.0 <= latitude <= 90.0:
            raise ValueError(f"latitude out of range: {latitude}")
        lat = math.radians(latitude)
        dec = math.radians(self.declination(day))
        sin_alpha = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec)
        if math.isnan(sin_alpha):
            logger.warning("Solar angle is NaN for lat=%s day=%s", latitude, day)
            return None
        return _clamp01(sin_alpha)

    def solar_punch(self, latitude: float, day: float) -> float | None:
        """Solar angle scaled by the catalyst: direct heating while the tilt is changing fast."""
        solar = self.solar_angle(latitude, day)
        if solar is None:
            return None
        return solar * self.catalyst(day)

    @staticmethod
    def gulf_sst(day: float, climate_offset: float = 0.0) -> float:
        """Seasonal Gulf SST proxy in °C (warmest in late summer)."""
        return (
            config.GULF_SST_BASELINE_C
            + config.GULF_SST_SEASONAL_AMPLITUDE_C
            * math.sin(_TWO_PI * (day - config.GULF_SST_PHASE_DAY) / config.DAYS_PER_YEAR)
            + climate_offset
        )

    def fuel(self, region: Region, day: float, climate_offset: float = 0.0) -> float:
        if self.settings.fuel_model == "scalar_lookup":
            warming = config.SCALAR_SST_CURRENT_C - config.SCALAR_SST_BASELINE_C + climate_offset
            adjusted = scalar_fuel(region) * (
                1.0 + config.WARMING_COEFFICIENT * warming * config.WARMING_SCALE
            )
            return _clamp01(adjusted)

        sst = self.gulf_sst(day, climate_offset)
        sst_norm = (sst - config.SST_NORM_FLOOR_C) / config.SST_NORM_RANGE_C
        decay = math.exp(-region.gulf_distance_km / config.FUEL_DECAY_LENGTH_KM)
        return _clamp01(sst_norm * decay * config.FUEL_GAIN)

    def _arctic_damping(self, climate_offset: float) -> float:
        # Warming shrinks the pole-to-equator temperature contrast
        return max(0.0, 1.0 - self.settings.arctic_damping * climate_offset * config.WARMING_SCALE)

    @staticmethod
    def seasonal_gradient(day: float) -> float:
        """Larger of the spring and fall collision bumps, before zone scaling."""
        spring = math.exp(
            -(((day - config.SPRING_GRADIENT_PEAK_DAY) / config.SPRING_GRADIENT_WIDTH) ** 2)
        )
        fall = config.FALL_GRADIENT_AMPLITUDE * math.exp(
            -(((day - config.FALL_GRADIENT_PEAK_DAY) / config.FALL_GRADIENT_WIDTH) ** 2)
        )
        return max(spring, fall)

    def gradient(self, region: Region, day: float, climate_offset: float = 0.0) -> float:
        damping = self._arctic_damping(climate_offset)
        if self.settings.fuel_model == "scalar_lookup":
            return _clamp01(scalar_gradient(region) * damping)
        return _clamp01(self.seasonal_gradient(day) * region.gradient_zone * damping)

    # ── Derived indices ───────────────────────────────────────────────────────

    @staticmethod
    def inversion_ratio(catalyst: float, solar_angle: float) -> float:
        return catalyst / (solar_angle + config.INVERSION_EPSILON)

    @staticmethod
    def discharge_mode(inversion_ratio: float) -> str:
        if inversion_ratio > config.HORIZONTAL_THRESHOLD:
            return "HORIZONTAL"
        if inversion_ratio > config.TRANSITIONAL_THRESHOLD:
            return "TRANSITIONAL"
        return "VERTICAL"

    def _build(
        self,
        region: Region,
        day: int,
        catalyst: float | None,
        solar: float | None,
        fuel: float | None,
        gradient: float | None,
        climate_offset: float,
        gulf_sst: float | None,
        source: str,
    ) -> FactorSet:
        fs = FactorSet(
            region_key=region.key,
            day_of_year=day,
            catalyst=catalyst,
            solar_angle=solar,
            fuel=fuel,
            gradient=gradient,
            climate_offset=climate_offset,
            gulf_sst=gulf_sst,
            source=source,
        )
        if catalyst is not None and solar is not None:
            fs.inversion_ratio = self.inversion_ratio(catalyst, solar)
            fs.discharge_mode = self.discharge_mode(fs.inversion_ratio)
            if fuel is not None:
                fs.probability = fuel * catalyst * solar
            if gradient is not None:
                fs.volatility = gradient * catalyst * solar
            if fuel is not None and gradient is not None:
                fs.danger = fuel * gradient * catalyst ** 2 * solar ** 2
        return fs

    # ── Public API ────────────────────────────────────────────────────────────

    @staticmethod
    def _resolve(region: Region | str) -> Region:
        if isinstance(region, Region):
            return region
        return get_region(region)

    def compute_factors(
        self,
        region: Region | str,
        day: int,
        climate_offset: float = 0.0,
    ) -> FactorSet:
        """
        Compute the modelled factor set for a region and day of year.

        Raises RegionNotFoundError for an unknown region key.
        """
        reg = self._resolve(region)
        if self.settings.fuel_model == "distance_decay":
            gulf_sst = self.gulf_sst(day, climate_offset)
        else:
            gulf_sst = config.SCALAR_SST_CURRENT_C + climate_offset

        fs = self._build(
            reg,
            day,
            catalyst=self.catalyst(day),
            solar=self.solar_angle(reg.latitude, day),
            fuel=self.fuel(reg, day, climate_offset),
            gradient=self.gradient(reg, day, climate_offset),
            climate_offset=climate_offset,
            gulf_sst=gulf_sst,
            source="computed",
        )
        logger.debug(
            "%s day %d (offset %+.1f): cat=%.3f sol=%.3f fuel=%.3f grad=%.3f danger=%.4f",
            reg.key, day, climate_offset,
            fs.catalyst, fs.solar_angle if fs.solar_angle is not None else float("nan"),
            fs.fuel, fs.gradient, fs.danger if fs.danger is not None else float("nan"),
        )
        return fs

    def compute_observed_factors(
        self,
        region: Region | str,
        day: int,
        observations: ObservationSet,
    ) -> FactorSet:
        """
        Factor set with fuel and gradient taken from live measurements.

        Catalyst and solar angle are geometry and always computable.  Fuel
        and gradient are None when their measurements are missing, and so
        is every index that depends on them.
        """
        reg = self._resolve(region)
        fuel = observed_factors.observed_fuel(observations.gulf_sst_c, observations.relative_humidity)
        gradient = observed_factors.observed_gradient(observations.pressure_mb, observations.wind_speed_kmh)
        if fuel is None or gradient is None:
            logger.info(
                "Observed factors incomplete for %s: fuel=%s gradient=%s",
                reg.key, fuel, gradient,
            )
        return self._build(
            reg,
            day,
            catalyst=self.catalyst(day),
            solar=self.solar_angle(reg.latitude, day),
            fuel=fuel,
            gradient=gradient,
            climate_offset=0.0,
            gulf_sst=observed_factors.clean(observations.gulf_sst_c),
            source="observed",
        )

    def compare_regions(
        self,
        day: int,
        climate_offset: float = 0.0,
        keys: list[str] | None = None,
    ) -> tuple[dict[str, FactorSet], list[str]]:
        """
        Compute factors for several regions on the same day.

        Unknown keys are skipped and returned in the second element instead
        of aborting the batch.
        """
        results: dict[str, FactorSet] = {}
        missing: list[str] = []
        for key in keys if keys is not None else list_regions():
            try:
                results[key] = self.compute_factors(key, day, climate_offset)
            except RegionNotFoundError:
                logger.warning("Skipping unknown region %r", key)
                missing.append(key)
        return results, missing


# ── Labels ────────────────────────────────────────────────────────────────────

_RISK_LEVELS = [
    (0.15, 5, "EXTREME"),
    (0.08, 4, "HIGH"),
    (0.04, 3, "MODERATE"),
    (0.02, 2, "LOW"),
]

_EF_SCALE = [
    (0.90, "EF5"),
    (0.80, "EF4"),
    (0.65, "EF3"),
    (0.50, "EF2"),
    (0.35, "EF1"),
]


def risk_level(danger: float) -> tuple[int, str]:
    """Map the danger index to a (level, label) pair, 1 = MINIMAL … 5 = EXTREME."""
    for threshold, level, label in _RISK_LEVELS:
        if danger > threshold:
            return level, label
    return 1, "MINIMAL"


def tornado_scale(volatility: float) -> str:
    """Map volatility onto an Enhanced Fujita rating."""
    for threshold, rating in _EF_SCALE:
        if volatility > threshold:
            return rating
    return "EF0"
