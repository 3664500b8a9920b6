from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """A named location the factor engine can be evaluated for."""

    key: str  # lookup key, e.g. "tornado_alley"
    name: str
    latitude: float  # degrees, -90..90
    gulf_distance_km: float  # great-circle-ish distance to the Gulf moisture source
    gradient_zone: float  # 0..1, how exposed the region is to air-mass collisions
    # Scalar-lookup shape; None means derive from the distance-based fields
    base_fuel: float | None = None
    base_gradient: float | None = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range for {self.key}: {self.latitude}")
        if self.gulf_distance_km < 0:
            raise ValueError(f"negative Gulf distance for {self.key}: {self.gulf_distance_km}")
        if not 0.0 <= self.gradient_zone <= 1.0:
            raise ValueError(f"gradient zone must be within [0, 1] for {self.key}")
