from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Candidate:
    """A weather type that passed its threshold gate, with its match score."""

    type: str
    score: float  # 0..1
    severity: int
    category: str


@dataclass(frozen=True)
class ClassificationResult:
    primary: str
    secondary: str | None
    confidence: float  # 0..1
    severity: int
    category: str
    temperature_regime: str | None  # COLD / COOL / MILD / WARM / HOT, None without solar+fuel
    candidates: list[Candidate] = field(default_factory=list)  # severity desc, then score desc
    regime_override: bool = False  # primary was forced by the cold-regime winter rule

    @property
    def candidate_types(self) -> list[str]:
        return [c.type for c in self.candidates]
