# agricloud/aggregator.py
"""
Builds the point-in-time view of one farm.

Weather, history and soil are independent requests and are awaited together.
Weather and history are mandatory: their failures reach the caller. Soil is
best effort: any failure is replaced by the location's simulated sample.
"""
import asyncio
import datetime
import logging
from typing import Optional, Tuple

from . import data_sources
from .errors import SoilUnavailable
from .schemas import Farm, FarmSnapshot, Location, SoilSample
from .soil import simulate_soil_sample

logger = logging.getLogger(__name__)


async def load_soil(lat: float, lon: float) -> SoilSample:
    try:
        return await asyncio.to_thread(data_sources.fetch_soil, lat, lon)
    except SoilUnavailable as e:
        logger.warning("soil provider unavailable for (%s, %s), using simulated sample: %s", lat, lon, e)
        return simulate_soil_sample(lat, lon)


async def _reuse(soil: SoilSample) -> SoilSample:
    return soil


async def _gather(location: Location, soil_task):
    # soil_task never raises, so a soil problem cannot abort the weather calls
    return await asyncio.gather(
        asyncio.to_thread(data_sources.fetch_weather, location.lat, location.lon),
        asyncio.to_thread(data_sources.fetch_history, location.lat, location.lon),
        soil_task,
    )


def _snapshot(weather, history, soil) -> FarmSnapshot:
    return FarmSnapshot(
        weather=weather,
        history=history,
        soil=soil,
        fetched_at=datetime.datetime.now(datetime.timezone.utc),
    )


async def aggregate(location: Location, existing_soil: Optional[SoilSample] = None) -> FarmSnapshot:
    if existing_soil is not None:
        soil_task = _reuse(existing_soil)
    else:
        soil_task = load_soil(location.lat, location.lon)
    weather, history, soil = await _gather(location, soil_task)
    return _snapshot(weather, history, soil)


async def aggregate_farm(farm: Farm) -> Tuple[Farm, FarmSnapshot]:
    """Snapshot ``farm`` and return it alongside a copy carrying its soil sample.

    Nothing is persisted; if weather or history fails, the exception reaches
    the caller and the enriched copy is discarded.
    """
    weather, history, enriched = await _gather(farm.location, enrich_soil(farm))
    return enriched, _snapshot(weather, history, enriched.soil)


async def enrich_soil(farm: Farm) -> Farm:
    """Return ``farm`` carrying a soil sample; the caller decides when to persist it."""
    if farm.soil is not None:
        return farm
    soil = await load_soil(farm.location.lat, farm.location.lon)
    return farm.model_copy(update={"soil": soil})
