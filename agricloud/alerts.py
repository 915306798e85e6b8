# agricloud/alerts.py
from typing import List, Optional

from .schemas import DEFAULT_THRESHOLDS, Alert, FarmSnapshot, Thresholds


def _fmt(value):
    # 38.0 -> "38", 38.5 -> "38.5"
    return f"{value:g}"


def evaluate_alerts(snapshot, thresholds: Optional[Thresholds] = None) -> List[Alert]:
    """
    Compare current conditions and today's forecast against the user's limits.

    Every check runs on every call and nothing is remembered between calls, so
    the same condition alerts again on the next refresh.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    weather = snapshot.weather if isinstance(snapshot, FarmSnapshot) else snapshot
    current = weather.current
    alerts = []

    if current.temperature > thresholds.temp_max:
        alerts.append(Alert(
            severity="danger",
            message=f"Temperature ({_fmt(current.temperature)}°C) exceeds threshold of {_fmt(thresholds.temp_max)}°C",
        ))
    if current.humidity < thresholds.humidity_min:
        alerts.append(Alert(
            severity="warning",
            message=f"Humidity ({_fmt(current.humidity)}%) is below minimum {_fmt(thresholds.humidity_min)}%",
        ))
    if current.soil_moisture_pct < thresholds.moisture_min:
        alerts.append(Alert(
            severity="warning",
            message=f"Soil Moisture ({current.soil_moisture_pct:.1f}%) is below minimum {_fmt(thresholds.moisture_min)}%",
        ))

    rain = weather.daily.precipitation_sum
    if rain and rain[0] > thresholds.rain_max:
        alerts.append(Alert(
            severity="danger",
            message=f"Heavy Rainfall Alert: Today's rain ({_fmt(rain[0])}mm) exceeds limit ({_fmt(thresholds.rain_max)}mm)",
        ))

    return alerts
