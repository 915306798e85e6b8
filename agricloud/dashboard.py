# agricloud/dashboard.py
"""
Per-farm operations behind the dashboard: refresh, irrigation control,
ledger entries and advisory plans.

Callers serialise calls for the same farm. Two overlapping predictions for
one farm run independently and neither is stored on the farm.
"""
import asyncio
import logging

from . import irrigation
from .advisory import request_advisory_plan
from .aggregator import aggregate_farm
from .alerts import evaluate_alerts
from .errors import FarmNotFound
from .schemas import AdvisoryPlan, DashboardView, Farm, FarmSnapshot, ScheduleDay
from .soil import texture_of
from .stores import FarmStore, UserStore

logger = logging.getLogger(__name__)


class FarmDashboard:
    def __init__(self, farms: FarmStore, users: UserStore, oracle=None):
        self.farms = farms
        self.users = users
        self.oracle = oracle

    def get_farm(self, farm_id: str) -> Farm:
        farm = self.farms.get(farm_id)
        if farm is None:
            raise FarmNotFound(farm_id)
        return farm

    async def _refresh(self, farm: Farm):
        # aggregation raises before anything is written, so a failed refresh
        # leaves the stored farm untouched
        had_soil = farm.soil is not None
        farm, snapshot = await aggregate_farm(farm)
        farm = self.farms.update(farm.model_copy(update={"last_updated": snapshot.fetched_at}))
        if not had_soil:
            logger.info("attached %s soil sample to farm %s",
                        "simulated" if farm.soil.simulated else "measured", farm.id)
        return farm, snapshot

    async def load(self, farm_id: str) -> DashboardView:
        farm, snapshot = await self._refresh(self.get_farm(farm_id))
        thresholds = self.users.get_thresholds(farm.user_id)
        alerts = evaluate_alerts(snapshot, thresholds)
        if alerts:
            logger.info("farm %s raised %d alert(s)", farm.id, len(alerts))
        return DashboardView(
            farm=farm,
            snapshot=snapshot,
            alerts=alerts,
            texture=texture_of(snapshot.soil),
            irrigation_planned_end=irrigation.planned_end(farm.irrigation_status),
            total_applied_mm=irrigation.total_applied_mm(farm.irrigation_logs),
        )

    async def snapshot(self, farm_id: str) -> FarmSnapshot:
        _, snapshot = await self._refresh(self.get_farm(farm_id))
        return snapshot

    # --- irrigation control ---

    def _save_status(self, farm: Farm, status) -> Farm:
        farm = farm.model_copy(update={"irrigation_status": status})
        return self.farms.update(farm)

    def start_irrigation(self, farm_id: str, source=None, duration_minutes=None) -> Farm:
        farm = self.get_farm(farm_id)
        if source is None and duration_minutes is None:
            status = irrigation.start_manual_irrigation(farm.irrigation_status)
        else:
            status = irrigation.start_irrigation(
                farm.irrigation_status,
                irrigation.MANUAL_SOURCE if source is None else source,
                irrigation.MANUAL_DURATION_MINUTES if duration_minutes is None else duration_minutes,
            )
        logger.info("irrigation started on farm %s by %s for %s min",
                    farm_id, status.source, status.duration_minutes)
        return self._save_status(farm, status)

    def stop_irrigation(self, farm_id: str) -> Farm:
        farm = self.get_farm(farm_id)
        status = irrigation.stop_irrigation(farm.irrigation_status)
        logger.info("irrigation stopped on farm %s", farm_id)
        return self._save_status(farm, status)

    def toggle_irrigation(self, farm_id: str) -> Farm:
        farm = self.get_farm(farm_id)
        return self._save_status(farm, irrigation.toggle_irrigation(farm.irrigation_status))

    def log_irrigation(self, farm_id: str, amount_mm: float, date=None, source=irrigation.DEFAULT_LOG_SOURCE) -> Farm:
        farm = self.get_farm(farm_id)
        entry = irrigation.new_log_entry(amount_mm, date=date, source=source)
        logs = irrigation.append_log_entry(farm.irrigation_logs, entry)
        return self.farms.update(farm.model_copy(update={"irrigation_logs": logs}))

    def log_plan_day(self, farm_id: str, day: ScheduleDay) -> Farm:
        farm = self.get_farm(farm_id)
        entry = irrigation.log_entry_from_plan_day(day)
        logger.info("farm %s logged %s mm from plan day %s", farm_id, entry.amount_mm, day.date)
        logs = irrigation.append_log_entry(farm.irrigation_logs, entry)
        return self.farms.update(farm.model_copy(update={"irrigation_logs": logs}))

    # --- advisory ---

    async def predict(self, farm_id: str) -> AdvisoryPlan:
        if self.oracle is None:
            raise RuntimeError("no advisory oracle configured")
        farm, snapshot = await self._refresh(self.get_farm(farm_id))
        plan = await asyncio.to_thread(request_advisory_plan, farm, snapshot, self.oracle)
        logger.info("advisory plan for farm %s: %d day(s), alert level %s",
                    farm_id, len(plan.schedule), plan.alert_level)
        return plan
