from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ObservationSet:
    """
    Live measurements for one location.

    Every numeric field is independently nullable: a value the sources could
    not supply stays None and is never replaced by an estimate.
    """

    # Surface (NWS station)
    temperature_c: float | None = None
    dewpoint_c: float | None = None
    relative_humidity: float | None = None  # percent
    wind_speed_kmh: float | None = None
    wind_direction_deg: float | None = None
    pressure_mb: float | None = None

    # Atmospheric (Open-Meteo)
    cape: float | None = None  # J/kg
    cin: float | None = None  # J/kg
    lifted_index: float | None = None
    freezing_level_m: float | None = None
    lapse_rate_c_per_km: float | None = None
    lapse_upper_height_m: float | None = None
    shear_kmh: float | None = None

    # Gulf SST (Open-Meteo marine)
    gulf_sst_c: float | None = None  # primary sampling point
    gulf_sst_avg_c: float | None = None
    sst_readings: dict[str, float] = field(default_factory=dict)

    station: str | None = None
    observed_at: str | None = None  # timestamp as reported by the station
    fetched_at: datetime | None = None
    sources_ok: dict[str, bool] = field(default_factory=dict)  # "surface" / "atmospheric" / "sst"
    errors: dict[str, str] = field(default_factory=dict)
