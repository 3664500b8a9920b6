"""
Weather-type classifier — threshold gates plus a continuous match score.

Pipeline:
  1. Gate every weather type on its factor bounds (and inversion bounds)
  2. Score each passing type by how close the factors sit to its profile
  3. Rank by severity, then score (worst-case reporting: the most severe
     compatible type wins even if a milder one matches better)
  4. Bucket a temperature regime from solar angle and fuel
  5. In COLD/COOL regimes, promote the first qualifying winter type
  6. With no passing type, fall back to FAIR
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any

import config
from models.classification import Candidate, ClassificationResult
from models.weather_type import Criterion, WeatherTypeDefinition
from services.observed_factors import clean

logger = logging.getLogger("stormcast.classifier")

# ── Weather type table ────────────────────────────────────────────────────────

WEATHER_TYPES: dict[str, WeatherTypeDefinition] = {
    d.name: d
    for d in [
        # Severe: rotation needs catalyst and gradient together
        WeatherTypeDefinition(
            "TORNADO", 10, "severe",
            {
                "catalyst": Criterion(min=0.50, typical=0.80),
                "gradient": Criterion(min=0.45, typical=0.72),
                "fuel": Criterion(min=0.40, typical=0.49),
                "danger": Criterion(min=0.05, typical=0.15),
            },
            inversion_max=1.0,
            color="#dc2626",
        ),
        WeatherTypeDefinition(
            "SUPERCELL", 9, "severe",
            {
                "catalyst": Criterion(min=0.40, typical=0.65),
                "gradient": Criterion(min=0.35, typical=0.55),
                "fuel": Criterion(min=0.35, typical=0.45),
                "danger": Criterion(min=0.03, typical=0.08),
            },
            color="#ea580c",
        ),
        WeatherTypeDefinition(
            "SEVERE_TSTORM", 8, "severe",
            {
                "catalyst": Criterion(min=0.25, typical=0.50),
                "gradient": Criterion(min=0.10, typical=0.30),
                "fuel": Criterion(min=0.30, typical=0.45),
                "danger": Criterion(min=0.005, typical=0.03),
            },
            color="#f59e0b",
        ),
        # High fuel with little rotation discharges in a line
        WeatherTypeDefinition(
            "DERECHO", 8, "severe",
            {
                "catalyst": Criterion(max=0.35),
                "fuel": Criterion(min=0.65),
                "gradient": Criterion(min=0.20, max=0.50),
                "solar_angle": Criterion(min=0.70),
            },
            color="#0891b2",
        ),
        WeatherTypeDefinition(
            "THUNDERSTORM", 5, "convective",
            {
                "fuel": Criterion(min=0.35),
                "solar_angle": Criterion(min=0.50),
                "catalyst": Criterion(min=0.15),
            },
            color="#eab308",
        ),
        WeatherTypeDefinition(
            "SHOWERS", 3, "rain",
            {
                "fuel": Criterion(min=0.25),
                "solar_angle": Criterion(min=0.40),
            },
            color="#22c55e",
        ),
        WeatherTypeDefinition(
            "RAIN", 3, "rain",
            {
                "fuel": Criterion(min=0.20),
                "gradient": Criterion(min=0.05),
            },
            color="#10b981",
        ),
        WeatherTypeDefinition(
            "DRIZZLE", 2, "rain",
            {
                "fuel": Criterion(min=0.15, max=0.35),
                "gradient": Criterion(max=0.15),
            },
            color="#6ee7b7",
        ),
        # Winter: horizontal discharge, little solar input
        WeatherTypeDefinition(
            "BLIZZARD", 7, "winter",
            {
                "catalyst": Criterion(min=0.60),
                "fuel": Criterion(max=0.30),
                "solar_angle": Criterion(max=0.55),
                "gradient": Criterion(min=0.25),
            },
            inversion_min=1.0,
            color="#6366f1",
        ),
        WeatherTypeDefinition(
            "WINTER_STORM", 6, "winter",
            {
                "catalyst": Criterion(min=0.40),
                "fuel": Criterion(max=0.40),
                "solar_angle": Criterion(max=0.60),
                "gradient": Criterion(min=0.10),
            },
            color="#3b82f6",
        ),
        WeatherTypeDefinition(
            "ICE_STORM", 7, "winter",
            {
                "catalyst": Criterion(min=0.30),
                "fuel": Criterion(min=0.25, max=0.50),
                "solar_angle": Criterion(min=0.45, max=0.65),
                "gradient": Criterion(min=0.15),
            },
            color="#8b5cf6",
        ),
        WeatherTypeDefinition(
            "FREEZING_RAIN", 5, "winter",
            {
                "fuel": Criterion(min=0.20, max=0.45),
                "solar_angle": Criterion(min=0.40, max=0.60),
            },
            color="#a855f7",
        ),
        WeatherTypeDefinition(
            "SNOW", 4, "winter",
            {
                "fuel": Criterion(max=0.35),
                "solar_angle": Criterion(max=0.55),
            },
            color="#60a5fa",
        ),
        WeatherTypeDefinition(
            "WINTER_MIX", 4, "winter",
            {
                "fuel": Criterion(min=0.20, max=0.45),
                "solar_angle": Criterion(min=0.45, max=0.65),
            },
            color="#818cf8",
        ),
        WeatherTypeDefinition(
            "BOMB_CYCLONE", 8, "winter",
            {
                "catalyst": Criterion(min=0.55),
                "fuel": Criterion(min=0.40),
            },
            inversion_min=1.2,
            color="#7c3aed",
        ),
        WeatherTypeDefinition(
            "HIGH_WIND", 5, "wind",
            {
                "catalyst": Criterion(min=0.35),
                "gradient": Criterion(min=0.20),
            },
            color="#06b6d4",
        ),
        # Quiet weather
        WeatherTypeDefinition(
            "FOG", 2, "visibility",
            {
                "catalyst": Criterion(max=0.25),
                "gradient": Criterion(max=0.10),
                "fuel": Criterion(min=0.20, max=0.50),
            },
            color="#9ca3af",
        ),
        WeatherTypeDefinition(
            "CLOUDY", 1, "clouds",
            {
                "fuel": Criterion(min=0.15),
                "gradient": Criterion(max=0.20),
            },
            color="#d1d5db",
        ),
        WeatherTypeDefinition(
            "PARTLY_CLOUDY", 1, "clouds",
            {
                "fuel": Criterion(min=0.10, max=0.40),
            },
            color="#e5e7eb",
        ),
        WeatherTypeDefinition(
            "FAIR", 0, "clear",
            {
                "fuel": Criterion(max=0.25),
                "gradient": Criterion(max=0.15),
                "catalyst": Criterion(max=0.30),
            },
            color="#fbbf24",
        ),
    ]
}


# ── Helpers ───────────────────────────────────────────────────────────────────


def _factor(factors: Any, name: str) -> float | None:
    """Read a factor off a FactorSet (or mapping); None, NaN and non-numeric values are "absent"."""
    if isinstance(factors, dict):
        value = factors.get(name)
    else:
        value = getattr(factors, name, None)
    return clean(value)


def criterion_score(value: float, criterion: Criterion) -> float:
    """Closeness of *value* to a criterion's profile, in [0, 1]."""
    lo, hi = criterion.min, criterion.max
    if criterion.typical is not None:
        return max(0.0, 1.0 - abs(value - criterion.typical))
    if lo is not None and hi is not None:
        span = hi - lo
        if span <= 0:
            return 1.0 if value == lo else 0.0
        mid = (lo + hi) / 2.0
        return max(0.0, 1.0 - abs(value - mid) / span)
    if lo is not None:
        if value < lo:
            return 0.0
        if lo >= 1.0:
            return 1.0
        return (value - lo) / (1.0 - lo)
    if hi is not None:
        if hi <= 0:
            return 1.0 if value <= hi else 0.0
        return max(0.0, (hi - value) / hi)
    return 1.0


def temperature_regime(solar_angle: float | None, fuel: float | None) -> str | None:
    if solar_angle is None or fuel is None:
        return None
    score = config.TEMP_SOLAR_WEIGHT * solar_angle + config.TEMP_FUEL_WEIGHT * fuel
    for name, upper in config.TEMP_REGIME_BANDS:
        if score < upper:
            return name
    return "HOT"


class Classifier:
    """
    Stateless scorer over a weather-type table.

    skip_missing_in_gate=False (default): a criterion whose factor is absent
    fails the gate, while the score simply leaves it out.  With True, absent
    factors are skipped in the gate too, and a type then needs at least one
    evaluable criterion to pass.
    """

    def __init__(
        self,
        weather_types: dict[str, WeatherTypeDefinition] | None = None,
        skip_missing_in_gate: bool = False,
    ) -> None:
        self.weather_types = weather_types if weather_types is not None else WEATHER_TYPES
        self.skip_missing_in_gate = skip_missing_in_gate

    # ── Gate ──────────────────────────────────────────────────────────────────

    def meets_threshold(self, factors: Any, definition: WeatherTypeDefinition) -> bool:
        evaluated = 0
        for name, criterion in definition.criteria.items():
            value = _factor(factors, name)
            if value is None:
                if self.skip_missing_in_gate:
                    continue
                return False
            evaluated += 1
            if not criterion.contains(value):
                return False

        if definition.inversion_min is not None or definition.inversion_max is not None:
            ratio = _factor(factors, "inversion_ratio")
            if ratio is None:
                if not self.skip_missing_in_gate:
                    return False
            else:
                evaluated += 1
                if definition.inversion_min is not None and ratio < definition.inversion_min:
                    return False
                if definition.inversion_max is not None and ratio > definition.inversion_max:
                    return False

        if self.skip_missing_in_gate and evaluated == 0:
            return False
        return True

    # ── Score ─────────────────────────────────────────────────────────────────

    @staticmethod
    def match_score(factors: Any, definition: WeatherTypeDefinition) -> float:
        """Mean criterion score over the factors that are present; 0 if none are."""
        total = 0.0
        checks = 0
        for name, criterion in definition.criteria.items():
            value = _factor(factors, name)
            if value is None:
                continue
            total += criterion_score(value, criterion)
            checks += 1
        return total / checks if checks else 0.0

    # ── Classification ────────────────────────────────────────────────────────

    @staticmethod
    def _with_danger(factors: Any) -> Any:
        """Fill in danger from the four base factors when the caller omitted it."""
        if _factor(factors, "danger") is not None:
            return factors
        base = [_factor(factors, n) for n in ("fuel", "gradient", "catalyst", "solar_angle")]
        if any(v is None for v in base):
            return factors
        fuel, gradient, catalyst, solar = base
        # Copy every field: custom tables may gate on probability or volatility
        if isinstance(factors, dict):
            view = dict(factors)
        elif is_dataclass(factors):
            view = asdict(factors)
        else:
            view = dict(vars(factors))
        view["danger"] = fuel * gradient * catalyst ** 2 * solar ** 2
        if _factor(view, "inversion_ratio") is None:
            view["inversion_ratio"] = catalyst / (solar + config.INVERSION_EPSILON)
        return view

    def rank_candidates(self, factors: Any) -> list[Candidate]:
        factors = self._with_danger(factors)
        candidates = [
            Candidate(
                type=d.name,
                score=self.match_score(factors, d),
                severity=d.severity,
                category=d.category,
            )
            for d in self.weather_types.values()
            if self.meets_threshold(factors, d)
        ]
        candidates.sort(key=lambda c: (-c.severity, -c.score))
        return candidates

    def classify(self, factors: Any) -> ClassificationResult:
        candidates = self.rank_candidates(factors)
        regime = temperature_regime(_factor(factors, "solar_angle"), _factor(factors, "fuel"))

        if not candidates:
            fair = self.weather_types.get("FAIR")
            logger.debug("No weather type passed its gate; defaulting to FAIR")
            return ClassificationResult(
                primary="FAIR",
                secondary=None,
                confidence=config.FALLBACK_CONFIDENCE,
                severity=fair.severity if fair else 0,
                category=fair.category if fair else "clear",
                temperature_regime=regime,
                candidates=[],
            )

        primary = candidates[0]
        override = False
        if regime in ("COLD", "COOL"):
            winter = next(
                (
                    c for c in candidates
                    if c.category == "winter" and c.score > config.WINTER_OVERRIDE_MIN_SCORE
                ),
                None,
            )
            if winter is not None and winter is not primary:
                logger.debug(
                    "%s regime: promoting %s over %s", regime, winter.type, primary.type,
                )
                primary = winter
                override = True

        secondary = next((c.type for c in candidates if c is not primary), None)
        # A top score of 0 carries no information; report the fallback confidence
        top_score = candidates[0].score
        confidence = min(1.0, top_score) if top_score > 0 else config.FALLBACK_CONFIDENCE
        return ClassificationResult(
            primary=primary.type,
            secondary=secondary,
            confidence=confidence,
            severity=primary.severity,
            category=primary.category,
            temperature_regime=regime,
            candidates=candidates,
            regime_override=override,
        )
