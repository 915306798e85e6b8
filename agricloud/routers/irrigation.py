# agricloud/routers/irrigation.py
import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from ..deps import get_dashboard
from ..irrigation import DEFAULT_LOG_SOURCE
from ..schemas import CamelModel, Farm, IrrigationLogEntry, ScheduleDay

router = APIRouter(prefix="/api/farms/{farm_id}/irrigation", tags=["Irrigation"])


class StartIn(CamelModel):
    # both empty -> manual override with the default duration
    source: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)


class LogIn(CamelModel):
    amount_mm: float = Field(alias="amountMM", gt=0)
    date: Optional[datetime.date] = None
    source: str = DEFAULT_LOG_SOURCE


@router.post("/start", response_model=Farm)
def start(farm_id: str, payload: Optional[StartIn] = None, dashboard=Depends(get_dashboard)):
    payload = payload or StartIn()
    return dashboard.start_irrigation(farm_id, payload.source, payload.duration_minutes)


@router.post("/stop", response_model=Farm)
def stop(farm_id: str, dashboard=Depends(get_dashboard)):
    return dashboard.stop_irrigation(farm_id)


@router.post("/toggle", response_model=Farm)
def toggle(farm_id: str, dashboard=Depends(get_dashboard)):
    return dashboard.toggle_irrigation(farm_id)


@router.get("/logs", response_model=List[IrrigationLogEntry])
def list_logs(farm_id: str, dashboard=Depends(get_dashboard)):
    return dashboard.get_farm(farm_id).irrigation_logs


@router.post("/logs", response_model=Farm, status_code=201)
def add_log(farm_id: str, payload: LogIn, dashboard=Depends(get_dashboard)):
    return dashboard.log_irrigation(farm_id, payload.amount_mm, date=payload.date, source=payload.source)


@router.post("/logs/from-plan", response_model=Farm, status_code=201)
def add_log_from_plan(farm_id: str, day: ScheduleDay, dashboard=Depends(get_dashboard)):
    try:
        return dashboard.log_plan_day(farm_id, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
