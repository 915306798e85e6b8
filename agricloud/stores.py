# agricloud/stores.py
"""
Repository interfaces the dashboard service depends on, plus the SQLAlchemy
implementations used by the HTTP app.
"""
import datetime
import logging
from typing import List, Optional, Protocol

from sqlalchemy import func

from . import models
from .database import SessionLocal
from .errors import FarmNotFound, FarmOwnershipError
from .schemas import (
    DEFAULT_THRESHOLDS,
    Farm,
    IrrigationLogEntry,
    IrrigationStatus,
    Location,
    SoilSample,
    Thresholds,
)

logger = logging.getLogger(__name__)


class FarmStore(Protocol):
    def list_for_user(self, user_id: str) -> List[Farm]: ...
    def get(self, farm_id: str) -> Optional[Farm]: ...
    def create(self, farm: Farm) -> Farm: ...
    def update(self, farm: Farm) -> Farm: ...
    def delete(self, farm_id: str) -> None: ...


class UserStore(Protocol):
    def get_thresholds(self, user_id: str) -> Thresholds: ...


def _as_utc(value):
    # sqlite hands back naive datetimes; everything stored is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _to_domain(row: models.Farm, log_rows) -> Farm:
    return Farm(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        crop=row.crop,
        location=Location(lat=row.lat, lon=row.lon),
        size=row.size or 0.0,
        planting_date=row.planting_date,
        soil=SoilSample.model_validate_json(row.soil_json) if row.soil_json else None,
        irrigation_status=(
            IrrigationStatus.model_validate_json(row.irrigation_status_json)
            if row.irrigation_status_json else IrrigationStatus()
        ),
        irrigation_logs=[
            IrrigationLogEntry(id=l.id, date=l.date, amount_mm=l.amount_mm, source=l.source)
            for l in log_rows
        ],
        last_updated=_as_utc(row.last_updated),
    )


def _copy_fields(row: models.Farm, farm: Farm):
    row.name = farm.name
    row.crop = farm.crop
    row.lat = farm.location.lat
    row.lon = farm.location.lon
    row.size = farm.size
    row.planting_date = farm.planting_date
    row.soil_json = farm.soil.model_dump_json(by_alias=True) if farm.soil else None
    row.irrigation_status_json = farm.irrigation_status.model_dump_json(by_alias=True, exclude_none=True)
    last_updated = _as_utc(farm.last_updated)
    row.last_updated = last_updated.astimezone(datetime.timezone.utc) if last_updated else None


class SqlFarmStore:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def _logs(self, db, farm_id):
        return (
            db.query(models.IrrigationLogRecord)
            .filter(models.IrrigationLogRecord.farm_id == farm_id)
            .order_by(models.IrrigationLogRecord.date.desc(), models.IrrigationLogRecord.seq.asc())
            .all()
        )

    def _append_new_logs(self, db, farm: Farm):
        # ledger is append-only: existing rows are never rewritten or removed
        known = {
            r[0] for r in db.query(models.IrrigationLogRecord.id)
            .filter(models.IrrigationLogRecord.farm_id == farm.id)
        }
        seq = db.query(func.max(models.IrrigationLogRecord.seq)).filter(
            models.IrrigationLogRecord.farm_id == farm.id).scalar() or 0
        for entry in farm.irrigation_logs:
            if entry.id in known:
                continue
            seq += 1
            db.add(models.IrrigationLogRecord(
                id=entry.id, farm_id=farm.id, seq=seq,
                date=entry.date, amount_mm=entry.amount_mm, source=entry.source,
            ))

    def list_for_user(self, user_id: str) -> List[Farm]:
        db = self.session_factory()
        try:
            rows = db.query(models.Farm).filter(models.Farm.user_id == user_id).order_by(models.Farm.created_at).all()
            return [_to_domain(row, self._logs(db, row.id)) for row in rows]
        finally:
            db.close()

    def get(self, farm_id: str) -> Optional[Farm]:
        db = self.session_factory()
        try:
            row = db.query(models.Farm).filter(models.Farm.id == farm_id).first()
            if not row:
                return None
            return _to_domain(row, self._logs(db, farm_id))
        finally:
            db.close()

    def create(self, farm: Farm) -> Farm:
        db = self.session_factory()
        try:
            row = models.Farm(id=farm.id, user_id=farm.user_id)
            _copy_fields(row, farm)
            db.add(row)
            db.flush()
            self._append_new_logs(db, farm)
            db.commit()
            logger.info("created farm %s for user %s", farm.id, farm.user_id)
            return farm
        finally:
            db.close()

    def update(self, farm: Farm) -> Farm:
        db = self.session_factory()
        try:
            row = db.query(models.Farm).filter(models.Farm.id == farm.id).first()
            if not row:
                raise FarmNotFound(farm.id)
            if row.user_id != farm.user_id:
                raise FarmOwnershipError(farm.id)
            _copy_fields(row, farm)
            self._append_new_logs(db, farm)
            db.commit()
            return farm
        finally:
            db.close()

    def delete(self, farm_id: str) -> None:
        db = self.session_factory()
        try:
            db.query(models.IrrigationLogRecord).filter(models.IrrigationLogRecord.farm_id == farm_id).delete()
            db.query(models.Farm).filter(models.Farm.id == farm_id).delete()
            db.commit()
            logger.info("deleted farm %s", farm_id)
        finally:
            db.close()


class SqlUserStore:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_thresholds(self, user_id: str) -> Thresholds:
        db = self.session_factory()
        try:
            user = db.query(models.User).filter(models.User.id == user_id).first()
        finally:
            db.close()
        if not user:
            return DEFAULT_THRESHOLDS
        configured = {
            "temp_max": user.temp_max,
            "humidity_min": user.humidity_min,
            "moisture_min": user.moisture_min,
            "rain_max": user.rain_max,
        }
        return Thresholds(**{k: v for k, v in configured.items() if v is not None})
