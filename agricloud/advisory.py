# agricloud/advisory.py
import json
import logging
from typing import Optional

from pydantic import ValidationError

from .errors import AdvisoryError, AdvisoryValidationError, InsufficientForecast
from .schemas import AdvisoryPlan, AdvisoryRequest, Farm, FarmSnapshot

logger = logging.getLogger(__name__)

# the oracle answers with one schedule row per forecast day sent
FORECAST_DAYS = 7

PROMPT_TEMPLATE = """\
Agronomist Task: Create {days}-day irrigation plan.

Farm: {farm_name} ({crop})
Soil: Sand {sand}%, Clay {clay}%, pH {ph}

Forecast (Next {days} Days):
- Dates: {dates}
- MaxTemp: {temp_max}
- Rain: {rain}
- ET0: {et0}

Goal: Balance Soil Moisture vs Rain/ET0.

Return strict JSON:
{{
  "schedule": [
    {{ "date": "YYYY-MM-DD", "action": "Irrigate" | "Monitor" | "Hold", "amountMM": 0, "reasoning": "Max 5 words" }}
  ],
  "summary": "Max 15 words summary.",
  "alertLevel": "Low" | "Medium" | "High"
}}
"""


def _first_days(name, values, days=FORECAST_DAYS):
    if len(values) < days:
        raise InsufficientForecast(name, len(values), days)
    return list(values[:days])


def build_advisory_request(farm: Farm, snapshot: FarmSnapshot) -> AdvisoryRequest:
    soil = snapshot.soil or farm.soil
    if soil is None:
        raise AdvisoryError(f"farm {farm.id} has no soil sample")
    daily = snapshot.weather.daily
    return AdvisoryRequest(
        farm_name=farm.name,
        crop=farm.crop,
        soil_sand=soil.sand,
        soil_clay=soil.clay,
        soil_ph=soil.ph,
        dates=_first_days("date", daily.date),
        temp_max=_first_days("tempMax", daily.temp_max),
        precipitation_sum=_first_days("precipitationSum", daily.precipitation_sum),
        et0=_first_days("et0", daily.et0),
    )


def render_prompt(request: AdvisoryRequest) -> str:
    return PROMPT_TEMPLATE.format(
        days=len(request.dates),
        farm_name=request.farm_name,
        crop=request.crop,
        sand=request.soil_sand,
        clay=request.soil_clay,
        ph=request.soil_ph,
        dates=json.dumps(request.dates),
        temp_max=json.dumps(request.temp_max),
        rain=json.dumps(request.precipitation_sum),
        et0=json.dumps(request.et0),
    )


def validate_advisory_response(raw, expected_days: Optional[int] = None) -> AdvisoryPlan:
    """
    Parse the oracle's reply into an AdvisoryPlan. ``raw`` may be the decoded
    object or the JSON text. Nothing is repaired: any deviation from the
    contract raises AdvisoryValidationError with pydantic's error list.
    """
    try:
        if isinstance(raw, (str, bytes)):
            plan = AdvisoryPlan.model_validate_json(raw)
        else:
            plan = AdvisoryPlan.model_validate(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_input=False)
        logger.warning("advisory response rejected: %s", errors)
        raise AdvisoryValidationError(f"advisory response invalid: {e.error_count()} error(s)", errors) from e

    if expected_days is not None and len(plan.schedule) != expected_days:
        raise AdvisoryValidationError(
            f"advisory schedule has {len(plan.schedule)} days, expected {expected_days}",
            [{"loc": ["schedule"], "msg": "schedule length mismatch", "type": "length"}],
        )
    return plan


def request_advisory_plan(farm: Farm, snapshot: FarmSnapshot, oracle) -> AdvisoryPlan:
    request = build_advisory_request(farm, snapshot)
    raw = oracle.complete(render_prompt(request))
    return validate_advisory_response(raw, expected_days=len(request.dates))
