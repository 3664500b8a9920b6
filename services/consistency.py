"""
Internal consistency checks: does the model reproduce its own documented
seasonal behaviour (spring tornado peak, solstice lull, equinox symmetry)?
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from services.classifier import Classifier
from services.factor_engine import FactorEngine

logger = logging.getLogger("stormcast.consistency")

SEVERE_TYPES = ("TORNADO", "SUPERCELL", "SEVERE_TSTORM")


@dataclass
class ConsistencyCheck:
    name: str
    expected: str
    actual: Any
    passed: bool


@dataclass
class ConsistencyReport:
    checks: list[ConsistencyCheck] = field(default_factory=list)

    @property
    def pass_rate(self) -> float:
        if not self.checks:
            return 0.0
        return sum(1 for c in self.checks if c.passed) / len(self.checks)

    @property
    def failures(self) -> list[ConsistencyCheck]:
        return [c for c in self.checks if not c.passed]


def validate_historical(
    engine: FactorEngine | None = None,
    classifier: Classifier | None = None,
) -> ConsistencyReport:
    engine = engine or FactorEngine()
    classifier = classifier or Classifier()

    april_ok = engine.compute_factors("tornado_alley", 105)
    june_solstice = engine.compute_factors("tornado_alley", 172)
    march_ar = engine.compute_factors("dixie_alley", 75)
    nov_al = engine.compute_factors("dixie_alley", 319)
    sept_equinox = engine.compute_factors("tornado_alley", 266)

    april_type = classifier.classify(april_ok).primary
    march_type = classifier.classify(march_ar).primary

    report = ConsistencyReport(checks=[
        ConsistencyCheck(
            "April Oklahoma shows severe rotation",
            "one of " + "/".join(SEVERE_TYPES),
            april_type,
            april_type in SEVERE_TYPES,
        ),
        ConsistencyCheck(
            "June solstice catalyst is at its minimum",
            "catalyst < 0.15",
            round(june_solstice.catalyst, 4),
            june_solstice.catalyst < 0.15,
        ),
        ConsistencyCheck(
            "June solstice danger stays low despite peak fuel",
            "danger < 0.1",
            round(june_solstice.danger, 4),
            june_solstice.danger < 0.1,
        ),
        ConsistencyCheck(
            "March Arkansas shows severe potential",
            "one of " + "/".join(SEVERE_TYPES),
            march_type,
            march_type in SEVERE_TYPES,
        ),
        ConsistencyCheck(
            "November Dixie Alley shows the secondary peak",
            "probability > 0.1",
            round(nov_al.probability, 4),
            nov_al.probability > 0.1,
        ),
        ConsistencyCheck(
            "September equinox catalyst is high",
            "catalyst > 0.95",
            round(sept_equinox.catalyst, 4),
            sept_equinox.catalyst > 0.95,
        ),
        ConsistencyCheck(
            "Spring and fall equinox catalysts match",
            "|spring - fall| < 0.05",
            f"spring {march_ar.catalyst:.3f}, fall {sept_equinox.catalyst:.3f}",
            abs(march_ar.catalyst - sept_equinox.catalyst) < 0.05,
        ),
    ])

    for check in report.failures:
        logger.warning("Consistency check failed: %s (expected %s, got %s)",
                       check.name, check.expected, check.actual)
    logger.info("Consistency checks: %d/%d passed",
                len(report.checks) - len(report.failures), len(report.checks))
    return report
