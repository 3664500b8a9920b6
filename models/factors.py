from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class FactorSet:
    """
    One (region, day) snapshot of the four base factors and their products.

    Any factor may be None when it came from the observed source and the
    underlying measurement was unavailable; derived indices are None if any
    of their inputs is.
    """

    region_key: str
    day_of_year: int
    catalyst: float | None
    solar_angle: float | None
    fuel: float | None
    gradient: float | None
    inversion_ratio: float | None = None
    discharge_mode: str | None = None  # "VERTICAL", "TRANSITIONAL", "HORIZONTAL"
    probability: float | None = None
    volatility: float | None = None
    danger: float | None = None
    climate_offset: float = 0.0
    gulf_sst: float | None = None  # °C, distance-decay and observed sources only
    source: str = "computed"  # "computed" or "observed"

    @property
    def is_complete(self) -> bool:
        return None not in (self.catalyst, self.solar_angle, self.fuel, self.gradient)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
