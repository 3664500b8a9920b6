import os
from dotenv import load_dotenv

load_dotenv()

# ── Astronomy ─────────────────────────────────────────────────────────────────
AXIAL_TILT_DEG = 23.44
DAYS_PER_YEAR = 365.25
CATALYST_PHASE_DAY = 80  # catalyst peaks here (spring equinox)
DECLINATION_PHASE_DAY = 81
SPRING_EQUINOX_DAY = 80
SUMMER_SOLSTICE_DAY = 172
FALL_EQUINOX_DAY = 266
WINTER_SOLSTICE_DAY = 355

# Derivative normalisation: 23.5° · (2π / 365.25) ≈ 0.4043 deg/day at the equinox
TILT_DERIVATIVE_AMPLITUDE_DEG = 23.5
TILT_DERIVATIVE_NORMALIZER = 0.405

# ── Fuel ──────────────────────────────────────────────────────────────────────
# distance-decay model
GULF_SST_BASELINE_C = 26.5
GULF_SST_SEASONAL_AMPLITUDE_C = 3.0
GULF_SST_PHASE_DAY = 45
SST_NORM_FLOOR_C = 20.0
SST_NORM_RANGE_C = 12.0
FUEL_DECAY_LENGTH_KM = 1500.0
FUEL_GAIN = 1.5

# scalar-lookup model
SCALAR_SST_BASELINE_C = 26.0
SCALAR_SST_CURRENT_C = 27.0
WARMING_COEFFICIENT = 1.0
WARMING_SCALE = 0.1

# ── Gradient ──────────────────────────────────────────────────────────────────
SPRING_GRADIENT_PEAK_DAY = 100
SPRING_GRADIENT_WIDTH = 45.0
FALL_GRADIENT_PEAK_DAY = 290
FALL_GRADIENT_WIDTH = 50.0
FALL_GRADIENT_AMPLITUDE = 0.7
ARCTIC_DAMPING = 0.3  # 0 disables climate-offset damping

# ── Inversion ─────────────────────────────────────────────────────────────────
INVERSION_EPSILON = 0.1
HORIZONTAL_THRESHOLD = 1.2
TRANSITIONAL_THRESHOLD = 1.0

# ── Classifier ────────────────────────────────────────────────────────────────
TEMP_SOLAR_WEIGHT = 0.6
TEMP_FUEL_WEIGHT = 0.4
# upper edge of each band; anything above the last edge is HOT
TEMP_REGIME_BANDS = [
    ("COLD", 0.35),
    ("COOL", 0.50),
    ("MILD", 0.65),
    ("WARM", 0.80),
]
WINTER_OVERRIDE_MIN_SCORE = 0.3
FALLBACK_CONFIDENCE = 0.5

# ── Engine defaults ───────────────────────────────────────────────────────────
FUEL_MODEL = os.getenv("STORMCAST_FUEL_MODEL", "distance_decay")
CATALYST_NORMALIZATION = os.getenv("STORMCAST_CATALYST_NORMALIZATION", "cosine")

# ── Live data ─────────────────────────────────────────────────────────────────
NWS_API_BASE = "https://api.weather.gov"
OPENMETEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
OPENMETEO_MARINE_URL = "https://marine-api.open-meteo.com/v1/marine"
NWS_USER_AGENT = os.getenv("NWS_USER_AGENT", "Stormcast/1.0 (storm-factor-engine)")
REQUEST_TIMEOUT_SECONDS = 15
OPENMETEO_TIMEZONE = "America/Chicago"

SURFACE_CACHE_TTL_SECONDS = 600  # 10 minutes
ATMOSPHERIC_CACHE_TTL_SECONDS = 1800  # 30 minutes
SST_CACHE_TTL_SECONDS = 3600  # 60 minutes

# Gulf of Mexico SST sampling points; the NE Gulf feeds the mid-South most directly
GULF_POINTS = [
    {"name": "Central Gulf", "lat": 26.0, "lon": -90.0},
    {"name": "NW Gulf", "lat": 27.5, "lon": -93.0},
    {"name": "NE Gulf", "lat": 28.5, "lon": -87.5},
]
PRIMARY_GULF_POINT = "NE Gulf"

# ── Reference location ────────────────────────────────────────────────────────
REFERENCE_LAT = float(os.getenv("REFERENCE_LAT", "34.7465"))
REFERENCE_LON = float(os.getenv("REFERENCE_LON", "-92.2896"))
REFERENCE_STATION = os.getenv("REFERENCE_STATION", "KLIT")
REFERENCE_REGION = os.getenv("REFERENCE_REGION", "little_rock")
