# agricloud/schemas.py
"""
Typed shapes for everything that crosses a boundary: provider payloads,
farm records, alerts and the advisory contract.

Python attributes are snake_case; the wire format (aliases) is camelCase so
stored farms and API responses keep the dashboard's field names.
"""
import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# --- soil ---

class SoilSample(CamelModel):
    ph: float
    organic_matter: float
    sand: float
    silt: float
    clay: float
    nitrogen: float
    bulk_density: float
    simulated: bool = False


# --- weather ---

class CurrentConditions(CamelModel):
    temperature: float
    humidity: float
    wind_speed: float
    rain: float
    surface_pressure: float
    cloud_cover: float
    et0: float = 0.0
    soil_moisture_pct: float = 0.0


def _check_parallel(model, names):
    lengths = {name: len(getattr(model, name)) for name in names}
    if len(set(lengths.values())) > 1:
        raise ValueError(f"parallel arrays differ in length: {lengths}")
    return model


class DailyForecast(CamelModel):
    date: List[str]
    temp_max: List[float]
    temp_min: List[float]
    precipitation_sum: List[float]
    et0: List[float]

    @model_validator(mode="after")
    def _parallel(self):
        return _check_parallel(self, ("date", "temp_max", "temp_min", "precipitation_sum", "et0"))


class HourlySoilMoisture(CamelModel):
    time: List[str] = Field(default_factory=list)
    soil_moisture: List[Optional[float]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _parallel(self):
        return _check_parallel(self, ("time", "soil_moisture"))


class WeatherSnapshot(CamelModel):
    current: CurrentConditions
    daily: DailyForecast
    hourly: HourlySoilMoisture = Field(default_factory=HourlySoilMoisture)


class HistoricalWeather(CamelModel):
    date: List[str]
    temp_max: List[Optional[float]]
    temp_min: List[Optional[float]]
    precipitation_sum: List[Optional[float]]
    # archive can lack soil data entirely, in which case this stays empty
    soil_moisture: List[Optional[float]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _parallel(self):
        _check_parallel(self, ("date", "temp_max", "temp_min", "precipitation_sum"))
        if self.soil_moisture and len(self.soil_moisture) != len(self.date):
            raise ValueError("soil moisture series does not match dates")
        return self


class FarmSnapshot(CamelModel):
    weather: WeatherSnapshot
    history: HistoricalWeather
    soil: SoilSample
    fetched_at: dt.datetime


# --- thresholds & alerts ---

class Thresholds(CamelModel):
    temp_max: float = 35.0
    humidity_min: float = 30.0
    moisture_min: float = 20.0
    rain_max: float = 20.0


DEFAULT_THRESHOLDS = Thresholds()


class Alert(CamelModel):
    severity: Literal["warning", "danger"]
    message: str


# --- irrigation ---

class IrrigationStatus(CamelModel):
    model_config = ConfigDict(frozen=True)

    is_active: bool = False
    source: Optional[str] = None
    start_time: Optional[dt.datetime] = None
    duration_minutes: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_idle_fields(cls, data):
        if isinstance(data, dict):
            active = data.get("isActive", data.get("is_active", False))
            if not active:
                return {"isActive": False}
        return data

    @model_validator(mode="after")
    def _active_needs_start(self):
        if self.is_active and self.start_time is None:
            raise ValueError("active irrigation requires a start time")
        return self


class IrrigationLogEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    date: dt.date
    amount_mm: float = Field(alias="amountMM", gt=0)
    source: str = Field(min_length=1)


# --- farm ---

class Location(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class Farm(CamelModel):
    id: str
    user_id: str = Field(frozen=True)
    name: str
    crop: str
    location: Location
    size: float = 0.0
    planting_date: Optional[dt.date] = None
    soil: Optional[SoilSample] = Field(default=None, alias="soilData")
    irrigation_status: IrrigationStatus = Field(default_factory=IrrigationStatus)
    irrigation_logs: List[IrrigationLogEntry] = Field(default_factory=list)
    last_updated: Optional[dt.datetime] = None


# --- advisory ---

class AdvisoryRequest(CamelModel):
    farm_name: str
    crop: str
    soil_sand: float
    soil_clay: float
    soil_ph: float
    dates: List[str]
    temp_max: List[float]
    precipitation_sum: List[float]
    et0: List[float]


class ScheduleDay(CamelModel):
    # oracle output is never coerced: "12" is not 12, literals match exactly
    date: str = Field(strict=True, pattern=r"^\d{4}-\d{2}-\d{2}$")
    action: Literal["Irrigate", "Monitor", "Hold"]
    amount_mm: Optional[float] = Field(default=None, alias="amountMM", strict=True)
    reasoning: str = Field(strict=True)


class AdvisoryPlan(CamelModel):
    schedule: List[ScheduleDay] = Field(min_length=1)
    summary: str = Field(strict=True)
    alert_level: Literal["Low", "Medium", "High"]


class DashboardView(CamelModel):
    farm: Farm
    snapshot: FarmSnapshot
    alerts: List[Alert]
    texture: str
    irrigation_planned_end: Optional[dt.datetime] = None
    total_applied_mm: float = 0.0
