# agricloud/data_sources.py
import datetime
import logging

import requests
from pydantic import ValidationError

from .config import get_settings
from .errors import ProviderUnavailable, SoilUnavailable
from .schemas import HistoricalWeather, SoilSample, WeatherSnapshot

logger = logging.getLogger(__name__)

CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,rain,wind_speed_10m,cloud_cover,"
    "surface_pressure,et0_fao_evapotranspiration,soil_moisture_0_to_1cm"
)
DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_sum,et0_fao_evapotranspiration"
HISTORY_FIELDS = "temperature_2m_max,temperature_2m_min,precipitation_sum,soil_moisture_0_to_7cm_mean"

SOIL_PROPERTIES = ("phh2o", "soc", "sand", "silt", "clay", "nitrogen", "bdod")
SOIL_DEPTH = "0-5cm"
# SoilGrids reports mapped units; divide to get pH, %, g/kg and g/cm3
SOIL_SCALE = {
    "phh2o": 10.0,
    "soc": 10.0,
    "sand": 10.0,
    "silt": 10.0,
    "clay": 10.0,
    "nitrogen": 100.0,
    "bdod": 100.0,
}

HISTORY_DAYS = 30


def get_json(url, params=None, timeout=None):
    """GET ``url`` and decode JSON; any transport, status or decode failure raises."""
    if timeout is None:
        timeout = get_settings().http_timeout
    r = requests.get(url, params=params, timeout=timeout)
    r.raise_for_status()
    return r.json()


def _fetch_provider_json(provider, url, params):
    try:
        return get_json(url, params)
    except (requests.RequestException, ValueError) as e:
        logger.error("%s fetch failed for %s: %s", provider, url, e)
        raise ProviderUnavailable(provider, str(e)) from e


# --- Open-Meteo forecast ---

def parse_open_meteo_forecast(r) -> WeatherSnapshot:
    current = r["current"]
    daily = r["daily"]
    hourly = r.get("hourly") or {}
    hourly_moisture = hourly.get("soil_moisture_0_to_1cm") or []
    return WeatherSnapshot.model_validate({
        "current": {
            "temperature": current["temperature_2m"],
            "humidity": current["relative_humidity_2m"],
            "windSpeed": current["wind_speed_10m"],
            "rain": current["rain"],
            "surfacePressure": current["surface_pressure"],
            "cloudCover": current["cloud_cover"],
            "et0": current.get("et0_fao_evapotranspiration") or 0,
            # m3/m3 -> volumetric %
            "soilMoisturePct": (current.get("soil_moisture_0_to_1cm") or 0) * 100,
        },
        "daily": {
            "date": daily["time"],
            "tempMax": daily["temperature_2m_max"],
            "tempMin": daily["temperature_2m_min"],
            "precipitationSum": daily["precipitation_sum"],
            "et0": daily["et0_fao_evapotranspiration"],
        },
        "hourly": {
            "time": hourly.get("time") or [],
            "soilMoisture": hourly_moisture,
        },
    })


def fetch_weather(lat, lon) -> WeatherSnapshot:
    settings = get_settings()
    params = {
        "latitude": lat,
        "longitude": lon,
        "current": CURRENT_FIELDS,
        "hourly": "soil_moisture_0_to_1cm",
        "daily": DAILY_FIELDS,
        "timezone": "auto",
    }
    r = _fetch_provider_json("weather", settings.open_meteo_url, params)
    try:
        return parse_open_meteo_forecast(r)
    except (KeyError, TypeError, ValidationError) as e:
        logger.error("weather payload rejected for (%s, %s): %s", lat, lon, e)
        raise ProviderUnavailable("weather", f"malformed forecast payload: {e}") from e


# --- Open-Meteo archive ---

def history_window(today=None, days=HISTORY_DAYS):
    today = today or datetime.date.today()
    return today - datetime.timedelta(days=days), today - datetime.timedelta(days=1)


def parse_open_meteo_archive(r) -> HistoricalWeather:
    daily = r["daily"]
    return HistoricalWeather.model_validate({
        "date": daily["time"],
        "tempMax": daily["temperature_2m_max"],
        "tempMin": daily["temperature_2m_min"],
        "precipitationSum": daily["precipitation_sum"],
        "soilMoisture": daily.get("soil_moisture_0_to_7cm_mean") or [],
    })


def fetch_history(lat, lon, start_date=None, end_date=None) -> HistoricalWeather:
    settings = get_settings()
    default_start, default_end = history_window()
    start_date = start_date or default_start
    end_date = end_date or default_end
    params = {
        "latitude": lat,
        "longitude": lon,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "daily": HISTORY_FIELDS,
        "timezone": "auto",
    }
    r = _fetch_provider_json("history", settings.open_meteo_archive_url, params)
    try:
        return parse_open_meteo_archive(r)
    except (KeyError, TypeError, ValidationError) as e:
        logger.error("history payload rejected for (%s, %s): %s", lat, lon, e)
        raise ProviderUnavailable("history", f"malformed archive payload: {e}") from e


# --- SoilGrids ---

def parse_soilgrids_topsoil(r) -> SoilSample:
    layers = (r.get("properties") or {}).get("layers") or []
    if not layers:
        raise SoilUnavailable("no soil layers for location (possibly water)")

    by_name = {layer.get("name"): layer for layer in layers}

    def value(name):
        layer = by_name.get(name)
        if layer is None:
            return 0.0
        depths = layer.get("depths") or []
        if not depths:
            return 0.0
        mean_val = (depths[0].get("values") or {}).get("mean")
        if mean_val is None:
            return 0.0
        return mean_val / SOIL_SCALE[name]

    return SoilSample(
        ph=value("phh2o"),
        organic_matter=value("soc"),
        sand=value("sand"),
        silt=value("silt"),
        clay=value("clay"),
        nitrogen=value("nitrogen"),
        bulk_density=value("bdod"),
        simulated=False,
    )


def fetch_soil(lat, lon) -> SoilSample:
    settings = get_settings()
    params = [("lat", lat), ("lon", lon)]
    params += [("property", p) for p in SOIL_PROPERTIES]
    params += [("depth", SOIL_DEPTH), ("value", "mean")]
    try:
        r = get_json(settings.soilgrids_url, params)
    except (requests.RequestException, ValueError) as e:
        raise SoilUnavailable(f"SoilGrids request failed: {e}") from e
    try:
        return parse_soilgrids_topsoil(r)
    except (AttributeError, TypeError, ValidationError) as e:
        raise SoilUnavailable(f"SoilGrids payload unusable: {e}") from e
