import datetime

import pytest
import requests

from agricloud import data_sources
from agricloud.errors import ProviderUnavailable, SoilUnavailable


class DummyResp:
    def __init__(self, status=200, data=None):
        self.status_code = status
        self._data = data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        if self._data is None:
            raise ValueError("no JSON body")
        return self._data


def forecast_payload(days=7):
    return {
        "current": {
            "temperature_2m": 31.2,
            "relative_humidity_2m": 48,
            "rain": 0.0,
            "wind_speed_10m": 7.4,
            "cloud_cover": 20,
            "surface_pressure": 1009.8,
            "et0_fao_evapotranspiration": None,
            "soil_moisture_0_to_1cm": 0.215,
        },
        "hourly": {"time": ["2024-06-01T00:00", "2024-06-01T01:00"], "soil_moisture_0_to_1cm": [0.22, 0.215]},
        "daily": {
            "time": [f"2024-06-{d:02d}" for d in range(1, days + 1)],
            "temperature_2m_max": [33.0] * days,
            "temperature_2m_min": [21.0] * days,
            "precipitation_sum": [0.4] * days,
            "et0_fao_evapotranspiration": [5.1] * days,
        },
    }


def soilgrids_payload():
    def layer(name, mean):
        return {"name": name, "depths": [{"label": "0-5cm", "values": {"mean": mean}}]}
    return {"properties": {"layers": [
        layer("phh2o", 65), layer("soc", 180), layer("sand", 420), layer("silt", 310),
        layer("clay", 270), layer("nitrogen", 150), layer("bdod", 135),
    ]}}


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(response=None, exc=None):
        def _get(url, params=None, timeout=None):
            calls.append({"url": url, "params": params, "timeout": timeout})
            if exc is not None:
                raise exc
            return response
        monkeypatch.setattr(data_sources.requests, "get", _get)
        return calls
    return install


def test_parse_forecast_converts_units():
    weather = data_sources.parse_open_meteo_forecast(forecast_payload())
    assert weather.current.temperature == 31.2
    assert weather.current.soil_moisture_pct == pytest.approx(21.5)
    assert weather.current.et0 == 0
    assert len(weather.daily.temp_max) == 7
    assert weather.hourly.soil_moisture == [0.22, 0.215]


def test_fetch_weather_sends_open_meteo_params(fake_get):
    calls = fake_get(DummyResp(data=forecast_payload()))
    weather = data_sources.fetch_weather(12.9, 77.6)
    assert weather.daily.date[0] == "2024-06-01"
    params = calls[0]["params"]
    assert params["latitude"] == 12.9
    assert "soil_moisture_0_to_1cm" in params["current"]
    assert params["timezone"] == "auto"
    assert calls[0]["timeout"] == 10.0


def test_fetch_weather_failure_is_not_masked(fake_get):
    fake_get(exc=requests.ConnectionError("refused"))
    with pytest.raises(ProviderUnavailable) as exc:
        data_sources.fetch_weather(12.9, 77.6)
    assert exc.value.provider == "weather"


def test_fetch_weather_http_error(fake_get):
    fake_get(DummyResp(status=503))
    with pytest.raises(ProviderUnavailable):
        data_sources.fetch_weather(12.9, 77.6)


def test_fetch_weather_rejects_malformed_payload(fake_get):
    payload = forecast_payload()
    payload["daily"]["et0_fao_evapotranspiration"] = [5.1] * 3
    fake_get(DummyResp(data=payload))
    with pytest.raises(ProviderUnavailable):
        data_sources.fetch_weather(12.9, 77.6)


def test_history_window_covers_thirty_days():
    start, end = data_sources.history_window(today=datetime.date(2024, 6, 1))
    assert start == datetime.date(2024, 5, 2)
    assert end == datetime.date(2024, 5, 31)


def test_fetch_history_without_soil_series(fake_get):
    calls = fake_get(DummyResp(data={"daily": {
        "time": ["2024-05-30", "2024-05-31"],
        "temperature_2m_max": [30.0, 31.0],
        "temperature_2m_min": [20.0, 19.5],
        "precipitation_sum": [0.0, 3.2],
    }}))
    history = data_sources.fetch_history(
        12.9, 77.6, start_date=datetime.date(2024, 5, 30), end_date=datetime.date(2024, 5, 31))
    assert history.soil_moisture == []
    assert history.precipitation_sum == [0.0, 3.2]
    assert calls[0]["params"]["start_date"] == "2024-05-30"


def test_fetch_history_failure_is_not_masked(fake_get):
    fake_get(exc=requests.Timeout("slow"))
    with pytest.raises(ProviderUnavailable) as exc:
        data_sources.fetch_history(12.9, 77.6)
    assert exc.value.provider == "history"


def test_parse_soilgrids_scales_units():
    sample = data_sources.parse_soilgrids_topsoil(soilgrids_payload())
    assert sample.ph == pytest.approx(6.5)
    assert sample.organic_matter == pytest.approx(18.0)
    assert sample.sand == pytest.approx(42.0)
    assert sample.clay == pytest.approx(27.0)
    assert sample.nitrogen == pytest.approx(1.5)
    assert sample.bulk_density == pytest.approx(1.35)
    assert sample.simulated is False


def test_missing_soil_layer_reads_as_zero():
    payload = soilgrids_payload()
    payload["properties"]["layers"] = [l for l in payload["properties"]["layers"] if l["name"] != "nitrogen"]
    assert data_sources.parse_soilgrids_topsoil(payload).nitrogen == 0.0


def test_open_water_has_no_soil():
    with pytest.raises(SoilUnavailable):
        data_sources.parse_soilgrids_topsoil({"properties": {"layers": []}})


def test_fetch_soil_requests_topsoil_properties(fake_get):
    calls = fake_get(DummyResp(data=soilgrids_payload()))
    data_sources.fetch_soil(12.9, 77.6)
    params = calls[0]["params"]
    assert ("depth", "0-5cm") in params
    assert [v for k, v in params if k == "property"] == list(data_sources.SOIL_PROPERTIES)


@pytest.mark.parametrize("kwargs", [
    {"exc": requests.Timeout("timed out")},
    {"response": DummyResp(status=500)},
    {"response": DummyResp(data=None)},
    {"response": DummyResp(data=["not", "a", "dict"])},
])
def test_fetch_soil_failures_become_soil_unavailable(fake_get, kwargs):
    fake_get(**kwargs)
    with pytest.raises(SoilUnavailable):
        data_sources.fetch_soil(12.9, 77.6)
