from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Criterion:
    """Bounds on a single factor. A missing bound is open on that side."""

    min: float | None = None
    max: float | None = None
    typical: float | None = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class WeatherTypeDefinition:
    name: str  # e.g. "TORNADO"
    severity: int  # higher = more severe
    category: str  # "severe", "winter", "wind", "convective", "rain", ...
    criteria: dict[str, Criterion] = field(default_factory=dict)  # factor name → bounds
    inversion_min: float | None = None
    inversion_max: float | None = None
    color: str = ""  # display only

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()
