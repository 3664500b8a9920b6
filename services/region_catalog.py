"""
Region catalog: the fixed table of locations the factor engine runs against.

The canonical shape is distance-based (latitude, distance to the Gulf of
Mexico, gradient zone).  Regions described in the older scalar shape
(a base fuel and base gradient per region) convert through
``region_from_scalars``; the inverse mapping (``scalar_fuel`` /
``scalar_gradient``) feeds the scalar-lookup fuel model.
"""
from __future__ import annotations

import logging
import math

import config
from models.region import Region

logger = logging.getLogger("stormcast.region_catalog")

# Gulf moisture source reference point for ad-hoc coordinates
_GULF_REF_LAT = 25.0
_GULF_REF_LON = -90.0
_KM_PER_DEG_LAT = 111.0
_KM_PER_DEG_LON = 85.0  # at ~35N

# Fuel at zero distance and baseline SST: 1.5 · (26.5 − 20) / 12
ZERO_DISTANCE_FUEL = (
    config.FUEL_GAIN
    * (config.GULF_SST_BASELINE_C - config.SST_NORM_FLOOR_C)
    / config.SST_NORM_RANGE_C
)


class RegionNotFoundError(KeyError):
    """Raised when a region key is not in the catalog."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"unknown region: {self.key!r}"


# ── Distance-based table ──────────────────────────────────────────────────────
# key → (name, latitude, gulf distance km, gradient zone)
_REGION_TABLE: dict[str, tuple[str, float, float, float]] = {
    # Arkansas
    "benton_ar": ("Benton, AR", 34.5645, 650.0, 0.85),
    "little_rock": ("Little Rock, AR", 34.7465, 680.0, 0.82),
    "haskell_ar": ("Haskell, AR", 34.5012, 645.0, 0.86),
    # National
    "tornado_alley": ("Tornado Alley (OK/KS)", 35.5, 800.0, 1.00),
    "dixie_alley": ("Dixie Alley (MS/AL)", 33.0, 350.0, 0.75),
    "gulf_coast": ("Gulf Coast", 30.0, 50.0, 0.60),
    "southern_plains": ("Southern Plains (TX)", 33.0, 450.0, 0.90),
    "southeast": ("Southeast (GA/SC)", 33.0, 400.0, 0.75),
    "midwest": ("Midwest (IL/IN/OH)", 40.0, 1100.0, 0.80),
    "northern_plains": ("Northern Plains (ND/SD)", 45.0, 1800.0, 0.50),
    "northeast": ("Northeast (NY/PA)", 42.0, 1700.0, 0.40),
    "pacific_nw": ("Pacific Northwest", 47.0, 3200.0, 0.30),
    "southwest": ("Southwest (AZ/NM)", 34.0, 1300.0, 0.20),
    # Inversion-window regions
    "great_lakes": ("Great Lakes", 43.0, 1500.0, 0.60),
    "new_england": ("New England", 43.5, 2200.0, 0.40),
    "alaska_se": ("Southeast Alaska", 57.5, 5000.0, 0.20),
}

REGIONS: dict[str, Region] = {
    key: Region(key=key, name=name, latitude=lat, gulf_distance_km=dist, gradient_zone=zone)
    for key, (name, lat, dist, zone) in _REGION_TABLE.items()
}

# ── Scalar-based table ────────────────────────────────────────────────────────
# The older shape: key → {lat, fuel, gradient}.  Kept for reference and for
# callers who want to evaluate the scalar-lookup model against the values it
# was tuned on; convert entries with region_from_scalars().
SCALAR_REGIONS: dict[str, dict[str, float]] = {
    "gulf_coast": {"lat": 30.0, "fuel": 1.00, "gradient": 0.6},
    "dixie_alley": {"lat": 34.0, "fuel": 0.90, "gradient": 1.0},
    "tornado_alley": {"lat": 36.0, "fuel": 0.80, "gradient": 1.0},
    "southern_plains": {"lat": 33.0, "fuel": 0.85, "gradient": 0.9},
    "midwest": {"lat": 40.0, "fuel": 0.65, "gradient": 0.8},
    "northern_plains": {"lat": 45.0, "fuel": 0.45, "gradient": 0.5},
    "northeast": {"lat": 42.0, "fuel": 0.40, "gradient": 0.4},
    "southeast": {"lat": 33.0, "fuel": 0.85, "gradient": 0.75},
    "pacific_nw": {"lat": 47.0, "fuel": 0.30, "gradient": 0.3},
    "southwest": {"lat": 34.0, "fuel": 0.25, "gradient": 0.2},
}


def get_region(key: str) -> Region:
    """Return the catalog region for *key*, raising RegionNotFoundError if absent."""
    try:
        return REGIONS[key]
    except KeyError:
        raise RegionNotFoundError(key) from None


def list_regions() -> list[str]:
    return list(REGIONS)


# ── Shape conversions ─────────────────────────────────────────────────────────


def distance_for_fuel(fuel: float) -> float:
    """
    Gulf distance at which the distance-decay model yields *fuel* at baseline SST.

    Inverts fuel = f0 · exp(−d / 1500).  Fuel at or above f0 maps to zero
    distance; non-positive fuel is treated as "very far" (10 decay lengths).
    """
    if fuel >= ZERO_DISTANCE_FUEL:
        return 0.0
    if fuel <= 0.0:
        return 10.0 * config.FUEL_DECAY_LENGTH_KM
    return -config.FUEL_DECAY_LENGTH_KM * math.log(fuel / ZERO_DISTANCE_FUEL)


def region_from_scalars(
    key: str,
    name: str,
    latitude: float,
    fuel: float,
    gradient: float,
) -> Region:
    """Convert a scalar-shaped region into the canonical distance-based shape."""
    return Region(
        key=key,
        name=name,
        latitude=latitude,
        gulf_distance_km=distance_for_fuel(fuel),
        gradient_zone=max(0.0, min(1.0, gradient)),
        base_fuel=fuel,
        base_gradient=gradient,
    )


def scalar_region(key: str) -> Region:
    """Build a region from the scalar table entry for *key*."""
    entry = SCALAR_REGIONS.get(key)
    if entry is None:
        raise RegionNotFoundError(key)
    name = REGIONS[key].name if key in REGIONS else key
    return region_from_scalars(key, name, entry["lat"], entry["fuel"], entry["gradient"])


def scalar_fuel(region: Region) -> float:
    """Base fuel scalar for the scalar-lookup model."""
    if region.base_fuel is not None:
        return region.base_fuel
    return ZERO_DISTANCE_FUEL * math.exp(-region.gulf_distance_km / config.FUEL_DECAY_LENGTH_KM)


def scalar_gradient(region: Region) -> float:
    """Base gradient scalar for the scalar-lookup model."""
    if region.base_gradient is not None:
        return region.base_gradient
    return region.gradient_zone


# ── Ad-hoc coordinates ────────────────────────────────────────────────────────


def gulf_distance_km(lat: float, lon: float) -> float:
    """Flat-earth distance from (lat, lon) to the Gulf reference point."""
    dlat = (lat - _GULF_REF_LAT) * _KM_PER_DEG_LAT
    dlon = (lon - _GULF_REF_LON) * _KM_PER_DEG_LON
    return math.sqrt(dlat * dlat + dlon * dlon)


def gradient_zone_for_latitude(lat: float) -> float:
    """Gradient zone by latitude band; the 33–42N collision belt is strongest."""
    if 33.0 <= lat <= 42.0:
        return 1.0
    if 30.0 <= lat < 33.0:
        return 0.85
    if 42.0 < lat <= 48.0:
        return 0.75
    if 25.0 <= lat < 30.0:
        return 0.6
    return 0.4


def region_from_coordinates(lat: float, lon: float, name: str | None = None) -> Region:
    """Build an uncatalogued region for arbitrary coordinates."""
    key = f"{lat:.2f},{lon:.2f}"
    region = Region(
        key=key,
        name=name or f"{abs(lat):.2f}°{'N' if lat >= 0 else 'S'}, {abs(lon):.2f}°{'W' if lon < 0 else 'E'}",
        latitude=lat,
        gulf_distance_km=gulf_distance_km(lat, lon),
        gradient_zone=gradient_zone_for_latitude(lat),
    )
    logger.debug(
        "Ad-hoc region %s: %.0f km from Gulf, zone %.2f",
        key, region.gulf_distance_km, region.gradient_zone,
    )
    return region
