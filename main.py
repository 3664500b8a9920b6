#!/usr/bin/env python3
"""
Stormcast: seasonal storm-geometry factors and weather-type classification.

Fetches live observations for the reference location, evaluates both the
modelled and the observed factor sets, classifies each, and prints a short
report.  Every snapshot is appended to data/logs/ as JSONL.
"""
from __future__ import annotations

import asyncio
import logging
import sys
from datetime import date

import aiohttp

import config
from models.classification import ClassificationResult
from models.factors import FactorSet
from models.observation import ObservationSet
from services import formatting
from services.classifier import Classifier
from services.factor_engine import FactorEngine, day_of_year, risk_level
from services.logger import log_classification, log_factor_set, log_observations
from services.observation_adapter import ObservationAdapter
from services.observed_factors import simple_risk
from services.region_catalog import get_region
from utils.weather_client import MarineClient, NWSClient, OpenMeteoClient

# ── Logging setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("stormcast")


def _print_banner(region_name: str, doy: int) -> None:
    print(f"""
╔══════════════════════════════════════╗
║           STORMCAST v1.0             ║
║  Storm geometry factor engine        ║
║  {region_name[:36]:<36s}║
║  Day of year: {doy:<23d}║
╚══════════════════════════════════════╝""")


def _print_factors(title: str, fs: FactorSet, result: ClassificationResult) -> None:
    fmt = formatting.format_value
    print(f"\n── {title} ({fs.source}) " + "─" * max(0, 40 - len(title)))
    print(f"  Catalyst:    {fmt(fs.catalyst, 3)}")
    print(f"  Solar angle: {fmt(fs.solar_angle, 3)}")
    print(f"  Fuel:        {fmt(fs.fuel, 3)}")
    print(f"  Gradient:    {fmt(fs.gradient, 3)}")
    print(f"  Inversion:   {fmt(fs.inversion_ratio, 2)}  {formatting.describe_discharge(fs.inversion_ratio)}")
    print(f"  Danger:      {fmt(fs.danger, 4)}", end="")
    if fs.danger is not None:
        print(f"  ({risk_level(fs.danger)[1]})")
    else:
        print()
    print(f"  Primary:     {result.primary} (confidence {result.confidence:.2f}, severity {result.severity})")
    print(f"  Forecast:    {formatting.generate_forecast(fs, result)}")


def _print_observations(obs: ObservationSet) -> None:
    fmt = formatting.format_value
    print("\n── Live observations " + "─" * 20)
    print(f"  Station:     {obs.station or formatting.NO_DATA}  {obs.observed_at or ''}")
    print(f"  Temperature: {fmt(obs.temperature_c, 1, '°C')}   Dewpoint: {fmt(obs.dewpoint_c, 1, '°C')}")
    print(f"  Humidity:    {formatting.humidity_modifier(obs.dewpoint_c, obs.relative_humidity)}")
    print(f"  Wind:        {fmt(obs.wind_speed_kmh, 0, ' km/h')} "
          f"{formatting.degrees_to_cardinal(obs.wind_direction_deg)}")
    print(f"  CAPE:        {formatting.cape_modifier(obs.cape, obs.cin)}")
    print(f"  Shear:       {formatting.shear_modifier(obs.shear_kmh)}")
    print(f"  Lapse rate:  {formatting.lapse_rate_modifier(obs.lapse_rate_c_per_km)}")
    print(f"  Gulf SST:    {fmt(obs.gulf_sst_c, 1, '°C')} (avg {fmt(obs.gulf_sst_avg_c, 1, '°C')})")
    for source, ok in obs.sources_ok.items():
        if not ok:
            print(f"  {source}: UNAVAILABLE ({obs.errors.get(source, 'unknown error')})")


async def main() -> int:
    region = get_region(config.REFERENCE_REGION)
    doy = day_of_year(date.today())
    _print_banner(region.name, doy)

    engine = FactorEngine()
    classifier = Classifier()

    modelled = engine.compute_factors(region, doy)
    modelled_result = classifier.classify(modelled)
    log_factor_set(modelled)
    log_classification(modelled, modelled_result)
    _print_factors("Modelled", modelled, modelled_result)

    async with aiohttp.ClientSession(
        headers={"User-Agent": config.NWS_USER_AGENT, "Accept": "application/geo+json"}
    ) as session:
        adapter = ObservationAdapter(
            NWSClient(session=session),
            OpenMeteoClient(session=session),
            MarineClient(session=session),
            lat=config.REFERENCE_LAT,
            lon=config.REFERENCE_LON,
            station=config.REFERENCE_STATION,
        )
        observations = await adapter.fetch()

    log_observations(observations)
    _print_observations(observations)

    observed = engine.compute_observed_factors(region, doy, observations)
    observed_result = classifier.classify(observed)
    log_factor_set(observed)
    log_classification(observed, observed_result)
    _print_factors("Observed", observed, observed_result)

    risk = simple_risk(observed.probability, observations.cape)
    if risk is None:
        print(f"\n  Storm risk:  {formatting.NO_DATA}")
    else:
        print(f"\n  Storm risk:  {risk[0]} - {risk[1]}")

    if not any(observations.sources_ok.values()):
        logger.warning("No live source responded; observed factors are incomplete")
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown requested via Ctrl+C")
        sys.exit(0)
