from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

import config

logger = logging.getLogger("stormcast.weather")

_MAX_ATTEMPTS = 3

# NWS point metadata cache: (lat, lon) → parsed point dict
_nws_point_cache: dict[tuple[float, float], dict[str, Any]] = {}


def _retry_after(header: str | None, default: float) -> float:
    """Seconds from a Retry-After header; the HTTP-date form falls back to *default*."""
    if header is None:
        return default
    try:
        return max(0.0, float(header))
    except ValueError:
        return default


async def _fetch_json(
    session: aiohttp.ClientSession,
    url: str,
    params: dict[str, Any] | None = None,
    label: str = "request",
) -> dict[str, Any] | None:
    """
    GET *url* and decode JSON, backing off on HTTP 429.

    Returns None on any other non-200 status, on network errors after
    retries, or if the body is not a JSON object.
    """
    backoff = 1.0
    for attempt in range(_MAX_ATTEMPTS):
        try:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT_SECONDS),
            ) as resp:
                if resp.status == 429:
                    retry_after = _retry_after(resp.headers.get("Retry-After"), backoff)
                    logger.warning(
                        "%s rate limited, backing off %.1fs (attempt %d)",
                        label, retry_after, attempt + 1,
                    )
                    await asyncio.sleep(retry_after)
                    backoff *= 2
                    continue
                if resp.status != 200:
                    logger.warning("%s failed: HTTP %d", label, resp.status)
                    return None
                # NWS serves application/geo+json; skip aiohttp's content-type check
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            if attempt == _MAX_ATTEMPTS - 1:
                logger.error("%s failed after retries: %s", label, exc)
                return None
            logger.warning("%s error (attempt %d): %s", label, attempt + 1, exc)
            await asyncio.sleep(backoff)
            backoff *= 2
            continue

        if not isinstance(data, dict):
            logger.warning("%s returned unexpected payload type %s", label, type(data).__name__)
            return None
        return data

    logger.error("%s still rate limited after %d attempts", label, _MAX_ATTEMPTS)
    return None


def _num(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ── NWS station observations ──────────────────────────────────────────────────


class NWSClient:
    """Async client for api.weather.gov point metadata and station observations."""

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "User-Agent": config.NWS_USER_AGENT,
                    "Accept": "application/geo+json",
                }
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def get_point(self, lat: float, lon: float) -> dict[str, Any] | None:
        """
        Resolve coordinates to NWS point metadata (cached).

        Returns {"name", "office", "grid_x", "grid_y", "stations_url"} or None.
        """
        cache_key = (round(lat, 4), round(lon, 4))
        if cache_key in _nws_point_cache:
            return _nws_point_cache[cache_key]

        session = await self._ensure_session()
        data = await _fetch_json(
            session, f"{config.NWS_API_BASE}/points/{lat:.4f},{lon:.4f}", label="NWS points",
        )
        if data is None:
            return None

        props = data.get("properties", {})
        rel = props.get("relativeLocation", {}).get("properties", {})
        point = {
            "name": f"{rel.get('city', 'Unknown')}, {rel.get('state', '')}".strip(", "),
            "office": props.get("gridId"),
            "grid_x": props.get("gridX"),
            "grid_y": props.get("gridY"),
            "stations_url": props.get("observationStations"),
        }
        _nws_point_cache[cache_key] = point
        return point

    async def get_nearest_station(self, lat: float, lon: float) -> str | None:
        """ICAO identifier of the first observation station listed for a point."""
        point = await self.get_point(lat, lon)
        if not point or not point.get("stations_url"):
            return None
        session = await self._ensure_session()
        data = await _fetch_json(session, point["stations_url"], label="NWS stations")
        if data is None:
            return None
        features = data.get("features") or []
        if not features:
            return None
        return features[0].get("properties", {}).get("stationIdentifier")

    async def get_latest_observation(self, station: str) -> dict[str, Any] | None:
        """
        Latest observation for an ICAO station (e.g. 'KLIT'), or None.

        Values are SI as NWS reports them, except pressure which is
        converted from Pa to mb.  Any individual field may be None.
        """
        session = await self._ensure_session()
        data = await _fetch_json(
            session,
            f"{config.NWS_API_BASE}/stations/{station}/observations/latest",
            label=f"NWS observation {station}",
        )
        if data is None:
            return None
        result = self.parse_observation(data.get("properties", {}))
        result["station"] = station
        logger.info(
            "NWS %s: temp=%s°C rh=%s%% wind=%s km/h pressure=%s mb",
            station, result["temperature_c"], result["relative_humidity"],
            result["wind_speed_kmh"], result["pressure_mb"],
        )
        return result

    @staticmethod
    def parse_observation(props: dict[str, Any]) -> dict[str, Any]:
        def value(name: str) -> float | None:
            return _num((props.get(name) or {}).get("value"))

        pressure_pa = value("barometricPressure")
        return {
            "temperature_c": value("temperature"),
            "dewpoint_c": value("dewpoint"),
            "relative_humidity": value("relativeHumidity"),
            "wind_speed_kmh": value("windSpeed"),
            "wind_direction_deg": value("windDirection"),
            "pressure_mb": pressure_pa / 100.0 if pressure_pa is not None else None,
            "timestamp": props.get("timestamp"),
        }


# ── Open-Meteo atmospheric data ──────────────────────────────────────────────


_WIND_LEVELS = (80, 120, 180)
_HOURLY_FIELDS = [
    "cape",
    "convective_inhibition",
    "lifted_index",
    "freezing_level_height",
    "temperature_80m",
    "temperature_120m",
    "temperature_180m",
] + [f"wind_speed_{h}m" for h in _WIND_LEVELS] + [f"wind_direction_{h}m" for h in _WIND_LEVELS]
_CURRENT_FIELDS = [
    "temperature_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "wind_direction_10m",
    "surface_pressure",
]


class OpenMeteoClient:
    """Async client for Open-Meteo hourly instability indices and multi-level profiles."""

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": config.NWS_USER_AGENT}
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def get_atmospheric(self, lat: float, lon: float) -> dict[str, Any] | None:
        session = await self._ensure_session()
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": ",".join(_HOURLY_FIELDS),
            "current": ",".join(_CURRENT_FIELDS),
            "temperature_unit": "celsius",
            "wind_speed_unit": "kmh",
            "timezone": config.OPENMETEO_TIMEZONE,
            "forecast_days": 1,
        }
        data = await _fetch_json(session, config.OPENMETEO_FORECAST_URL, params, label="Open-Meteo")
        if data is None:
            return None
        result = self.parse_atmospheric(data)
        logger.info(
            "Open-Meteo OK (%.2f, %.2f): CAPE=%s CIN=%s LI=%s",
            lat, lon, result["cape"], result["cin"], result["lifted_index"],
        )
        return result

    @staticmethod
    def _hour_index(hourly: dict[str, Any], current_time: str | None) -> int | None:
        """Index of the hourly slot containing *current_time* ("YYYY-MM-DDTHH:MM")."""
        times = hourly.get("time") or []
        if not current_time or not times:
            return None
        slot = current_time[:13] + ":00"
        try:
            return times.index(slot)
        except ValueError:
            return None

    @classmethod
    def parse_atmospheric(cls, data: dict[str, Any], hour_index: int | None = None) -> dict[str, Any]:
        """
        Flatten an Open-Meteo response into scalar fields for one hour.

        *hour_index* defaults to the slot matching the response's current
        time; hourly fields are None if no slot matches.
        """
        current = data.get("current") or {}
        hourly = data.get("hourly") or {}
        if hour_index is None:
            hour_index = cls._hour_index(hourly, current.get("time"))

        def at_hour(name: str) -> float | None:
            values = hourly.get(name)
            if hour_index is None or not isinstance(values, list) or hour_index >= len(values):
                return None
            return _num(values[hour_index])

        return {
            "time": current.get("time"),
            "cape": at_hour("cape"),
            "cin": at_hour("convective_inhibition"),
            "lifted_index": at_hour("lifted_index"),
            "freezing_level_m": at_hour("freezing_level_height"),
            "temperature_c": _num(current.get("temperature_2m")),
            "relative_humidity": _num(current.get("relative_humidity_2m")),
            "wind_speed_kmh": _num(current.get("wind_speed_10m")),
            "wind_direction_deg": _num(current.get("wind_direction_10m")),
            "pressure_mb": _num(current.get("surface_pressure")),
            "temperature_levels": {h: at_hour(f"temperature_{h}m") for h in _WIND_LEVELS},
            "wind_levels": {
                h: (at_hour(f"wind_speed_{h}m"), at_hour(f"wind_direction_{h}m"))
                for h in _WIND_LEVELS
            },
        }


# ── Open-Meteo marine SST ────────────────────────────────────────────────────


class MarineClient:
    """Sea-surface temperature from the Open-Meteo marine API."""

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": config.NWS_USER_AGENT}
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def get_sst(self, lat: float, lon: float) -> float | None:
        session = await self._ensure_session()
        data = await _fetch_json(
            session,
            config.OPENMETEO_MARINE_URL,
            {"latitude": lat, "longitude": lon, "current": "sea_surface_temperature"},
            label=f"Marine SST ({lat:.1f}, {lon:.1f})",
        )
        if data is None:
            return None
        return _num((data.get("current") or {}).get("sea_surface_temperature"))

    async def get_gulf_sst(
        self, points: list[dict[str, Any]] | None = None
    ) -> dict[str, Any] | None:
        """
        Sample SST at the Gulf points concurrently.

        Returns {"primary", "average", "readings": {name: sst}} or None if no
        point produced a reading.  The primary reading is the configured
        primary point when available, else the first valid one.
        """
        points = points if points is not None else config.GULF_POINTS
        values = await asyncio.gather(*(self.get_sst(p["lat"], p["lon"]) for p in points))
        readings = {p["name"]: v for p, v in zip(points, values) if v is not None}
        if not readings:
            logger.warning("No valid Gulf SST readings from %d points", len(points))
            return None

        primary = readings.get(config.PRIMARY_GULF_POINT, next(iter(readings.values())))
        average = sum(readings.values()) / len(readings)
        logger.info("Gulf SST: primary=%.1f°C avg=%.1f°C (%d points)", primary, average, len(readings))
        return {"primary": primary, "average": average, "readings": readings}
