import datetime
import os

os.environ.setdefault("AGRICLOUD_DATABASE_URL", "sqlite://")
os.environ.setdefault("ORACLE_API_KEY", "")

import pytest
from sqlalchemy.orm import sessionmaker

from agricloud.database import Base, make_engine
from agricloud.schemas import (
    Farm,
    FarmSnapshot,
    HistoricalWeather,
    Location,
    SoilSample,
    WeatherSnapshot,
)
from agricloud.stores import SqlFarmStore, SqlUserStore

START = datetime.date(2024, 6, 1)


def _dates(n, start=START):
    return [(start + datetime.timedelta(days=i)).isoformat() for i in range(n)]


@pytest.fixture
def make_weather():
    def _make(temperature=25.0, humidity=55.0, soil_moisture_pct=30.0, rain_today=2.0, days=7):
        return WeatherSnapshot.model_validate({
            "current": {
                "temperature": temperature,
                "humidity": humidity,
                "windSpeed": 3.2,
                "rain": 0.0,
                "surfacePressure": 1012.0,
                "cloudCover": 40.0,
                "et0": 0.2,
                "soilMoisturePct": soil_moisture_pct,
            },
            "daily": {
                "date": _dates(days),
                "tempMax": [30.0 + i for i in range(days)],
                "tempMin": [18.0 + i for i in range(days)],
                "precipitationSum": [rain_today if i == 0 else float(i) for i in range(days)],
                "et0": [4.0 + i / 10 for i in range(days)],
            },
            "hourly": {"time": ["2024-06-01T00:00"], "soilMoisture": [0.3]},
        })
    return _make


@pytest.fixture
def history():
    days = 30
    return HistoricalWeather(
        date=_dates(days, START - datetime.timedelta(days=days)),
        temp_max=[31.0] * days,
        temp_min=[19.0] * days,
        precipitation_sum=[1.5] * days,
        soil_moisture=[0.25] * days,
    )


@pytest.fixture
def soil():
    return SoilSample(ph=6.8, organic_matter=2.1, sand=42.0, silt=38.0, clay=20.0,
                      nitrogen=1.6, bulk_density=1.3, simulated=False)


@pytest.fixture
def make_snapshot(make_weather, history, soil):
    def _make(**weather_kwargs):
        return FarmSnapshot(
            weather=make_weather(**weather_kwargs),
            history=history,
            soil=soil,
            fetched_at=datetime.datetime(2024, 6, 1, 6, 0, tzinfo=datetime.timezone.utc),
        )
    return _make


@pytest.fixture
def farm():
    return Farm(
        id="farm-1",
        user_id="user-1",
        name="North Field",
        crop="Maize",
        location=Location(lat=12.9, lon=77.6),
        size=1200.0,
        planting_date=datetime.date(2024, 3, 15),
    )


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def farm_store(session_factory):
    return SqlFarmStore(session_factory)


@pytest.fixture
def user_store(session_factory):
    return SqlUserStore(session_factory)
