"""
Observation adapter — gathers live surface, atmospheric and Gulf SST data
for one location into an ObservationSet.

The three sources are fetched concurrently and cached with per-source TTLs.
A source that fails leaves its fields as None; nothing is estimated.
"""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

import config
from models.observation import ObservationSet
from services import observed_factors
from utils.weather_client import MarineClient, NWSClient, OpenMeteoClient

logger = logging.getLogger("stormcast.observations")


class ObservationAdapter:
    def __init__(
        self,
        nws: NWSClient,
        openmeteo: OpenMeteoClient,
        marine: MarineClient,
        lat: float = config.REFERENCE_LAT,
        lon: float = config.REFERENCE_LON,
        station: str | None = config.REFERENCE_STATION,
    ) -> None:
        self.nws = nws
        self.openmeteo = openmeteo
        self.marine = marine
        self.lat = lat
        self.lon = lon
        self.station = station
        # source → (payload, fetch time)
        self._cache: dict[str, tuple[Any, float]] = {}

    def set_location(self, lat: float, lon: float, station: str | None = None) -> None:
        """Move to a new location; cached data belongs to the old one and is dropped."""
        self.lat = lat
        self.lon = lon
        self.station = station
        self._cache.clear()

    async def _cached(
        self,
        source: str,
        ttl: float,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        hit = self._cache.get(source)
        if hit is not None and (time.monotonic() - hit[1]) < ttl:
            return hit[0]
        payload = await fetch()
        # Only successful fetches are cached so a failure is retried next call
        if payload is not None:
            self._cache[source] = (payload, time.monotonic())
        return payload

    async def _surface(self) -> dict[str, Any] | None:
        if not self.station:
            self.station = await self.nws.get_nearest_station(self.lat, self.lon)
            if not self.station:
                logger.warning("No NWS station found near (%.4f, %.4f)", self.lat, self.lon)
                return None
        return await self.nws.get_latest_observation(self.station)

    async def fetch(self) -> ObservationSet:
        surface, atmospheric, sst = await asyncio.gather(
            self._cached("surface", config.SURFACE_CACHE_TTL_SECONDS, self._surface),
            self._cached(
                "atmospheric",
                config.ATMOSPHERIC_CACHE_TTL_SECONDS,
                lambda: self.openmeteo.get_atmospheric(self.lat, self.lon),
            ),
            self._cached("sst", config.SST_CACHE_TTL_SECONDS, self.marine.get_gulf_sst),
        )
        return build_observation_set(surface, atmospheric, sst, station=self.station)


def build_observation_set(
    surface: dict[str, Any] | None,
    atmospheric: dict[str, Any] | None,
    sst: dict[str, Any] | None,
    station: str | None = None,
) -> ObservationSet:
    """Merge the three source payloads (any of which may be None)."""
    obs = ObservationSet(
        station=station,
        fetched_at=datetime.now(timezone.utc),
        sources_ok={
            "surface": surface is not None,
            "atmospheric": atmospheric is not None,
            "sst": sst is not None,
        },
    )

    if surface is not None:
        obs.temperature_c = observed_factors.clean(surface.get("temperature_c"))
        obs.dewpoint_c = observed_factors.clean(surface.get("dewpoint_c"))
        obs.relative_humidity = observed_factors.clean(surface.get("relative_humidity"))
        obs.wind_speed_kmh = observed_factors.clean(surface.get("wind_speed_kmh"))
        obs.wind_direction_deg = observed_factors.clean(surface.get("wind_direction_deg"))
        obs.pressure_mb = observed_factors.clean(surface.get("pressure_mb"))
        obs.observed_at = surface.get("timestamp")
    else:
        obs.errors["surface"] = "surface observation unavailable"

    if atmospheric is not None:
        obs.cape = observed_factors.clean(atmospheric.get("cape"))
        obs.cin = observed_factors.clean(atmospheric.get("cin"))
        obs.lifted_index = observed_factors.clean(atmospheric.get("lifted_index"))
        obs.freezing_level_m = observed_factors.clean(atmospheric.get("freezing_level_m"))

        temps = atmospheric.get("temperature_levels") or {}
        lapse = observed_factors.lapse_rate(
            atmospheric.get("temperature_c"), temps.get(80), temps.get(120), temps.get(180),
        )
        if lapse is not None:
            obs.lapse_rate_c_per_km, obs.lapse_upper_height_m = lapse

        winds = atmospheric.get("wind_levels") or {}
        shear = observed_factors.bulk_shear(
            (atmospheric.get("wind_speed_kmh"), atmospheric.get("wind_direction_deg")),
            [(float(h), speed, direction) for h, (speed, direction) in winds.items()],
        )
        if shear is not None:
            obs.shear_kmh = shear[0]
    else:
        obs.errors["atmospheric"] = "atmospheric data unavailable"

    if sst is not None:
        obs.gulf_sst_c = observed_factors.clean(sst.get("primary"))
        obs.gulf_sst_avg_c = observed_factors.clean(sst.get("average"))
        obs.sst_readings = dict(sst.get("readings") or {})
    else:
        obs.errors["sst"] = "no valid Gulf SST readings"

    return obs
