# agricloud/irrigation.py
import datetime
import uuid
from typing import List, Optional

from .errors import InvalidTransition
from .schemas import IrrigationLogEntry, IrrigationStatus, ScheduleDay

MANUAL_SOURCE = "Manual Override"
MANUAL_DURATION_MINUTES = 60

DEFAULT_LOG_SOURCE = "Manual Check"
PLAN_LOG_SOURCE = "AI Recommendation"

IDLE = IrrigationStatus()


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def _state(status: IrrigationStatus) -> str:
    return "active" if status.is_active else "idle"


# --- state machine: Idle <-> Active ---

def start_irrigation(status: IrrigationStatus, source: str, duration_minutes: int, now=None) -> IrrigationStatus:
    if status.is_active:
        raise InvalidTransition(_state(status), "start")
    if not source:
        raise ValueError("irrigation source is required")
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    return IrrigationStatus(
        is_active=True,
        source=source,
        start_time=now or _utcnow(),
        duration_minutes=duration_minutes,
    )


def start_manual_irrigation(status: IrrigationStatus, now=None) -> IrrigationStatus:
    return start_irrigation(status, MANUAL_SOURCE, MANUAL_DURATION_MINUTES, now=now)


def stop_irrigation(status: IrrigationStatus) -> IrrigationStatus:
    if not status.is_active:
        raise InvalidTransition(_state(status), "stop")
    return IDLE


def toggle_irrigation(status: IrrigationStatus, now=None) -> IrrigationStatus:
    if status.is_active:
        return stop_irrigation(status)
    return start_manual_irrigation(status, now=now)


def planned_end(status: IrrigationStatus) -> Optional[datetime.datetime]:
    # informational only: nothing stops irrigation when this passes
    if not status.is_active or status.duration_minutes is None:
        return None
    return status.start_time + datetime.timedelta(minutes=status.duration_minutes)


# --- ledger ---

def new_log_entry(amount_mm: float, date=None, source: str = DEFAULT_LOG_SOURCE) -> IrrigationLogEntry:
    return IrrigationLogEntry(
        id=uuid.uuid4().hex,
        date=date or datetime.date.today(),
        amount_mm=amount_mm,
        source=source,
    )


def log_entry_from_plan_day(day: ScheduleDay) -> IrrigationLogEntry:
    if day.action != "Irrigate" or not day.amount_mm:
        raise ValueError(f"plan day {day.date} has no irrigation to log")
    return new_log_entry(day.amount_mm, datetime.date.fromisoformat(day.date), PLAN_LOG_SOURCE)


def append_log_entry(log: List[IrrigationLogEntry], entry: IrrigationLogEntry) -> List[IrrigationLogEntry]:
    """Return a new log with ``entry`` added, newest date first.

    sorted() is stable with reverse=True, so entries sharing a date keep the
    order they were recorded in.
    """
    updated = list(log) + [entry]
    return sorted(updated, key=lambda e: e.date, reverse=True)


def total_applied_mm(log: List[IrrigationLogEntry], since=None) -> float:
    return sum(e.amount_mm for e in log if since is None or e.date >= since)
