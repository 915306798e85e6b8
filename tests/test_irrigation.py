import datetime

import pytest

from agricloud import irrigation
from agricloud.errors import InvalidTransition
from agricloud.schemas import IrrigationLogEntry, IrrigationStatus, ScheduleDay

NOW = datetime.datetime(2024, 6, 1, 7, 30, tzinfo=datetime.timezone.utc)


def _entry(id, date, amount=10.0, source="Manual Check"):
    return IrrigationLogEntry(id=id, date=date, amount_mm=amount, source=source)


def test_manual_start_uses_override_defaults():
    status = irrigation.start_manual_irrigation(IrrigationStatus(), now=NOW)
    assert status.is_active
    assert status.source == "Manual Override"
    assert status.duration_minutes == 60
    assert status.start_time == NOW


def test_automated_start_records_caller_values():
    status = irrigation.start_irrigation(IrrigationStatus(), "AI Schedule", 25, now=NOW)
    assert (status.source, status.duration_minutes) == ("AI Schedule", 25)


def test_start_defaults_to_current_time():
    before = datetime.datetime.now(datetime.timezone.utc)
    status = irrigation.start_manual_irrigation(IrrigationStatus())
    assert status.start_time >= before


def test_start_while_active_is_rejected():
    active = irrigation.start_manual_irrigation(IrrigationStatus(), now=NOW)
    with pytest.raises(InvalidTransition):
        irrigation.start_irrigation(active, "AI Schedule", 30)
    # unchanged
    assert active.source == "Manual Override"
    assert active.start_time == NOW


def test_stop_while_idle_is_rejected():
    idle = IrrigationStatus()
    with pytest.raises(InvalidTransition) as exc:
        irrigation.stop_irrigation(idle)
    assert exc.value.current == "idle"
    assert idle.is_active is False


def test_stop_clears_everything_but_flag():
    active = irrigation.start_manual_irrigation(IrrigationStatus(), now=NOW)
    stopped = irrigation.stop_irrigation(active)
    assert stopped == IrrigationStatus()
    assert stopped.model_dump(by_alias=True, exclude_none=True) == {"isActive": False}


def test_idle_status_drops_stale_fields():
    status = IrrigationStatus.model_validate({"isActive": False, "source": "Manual Override", "durationMinutes": 60})
    assert status.source is None
    assert status.duration_minutes is None


@pytest.mark.parametrize("duration", [0, -5])
def test_start_requires_positive_duration(duration):
    with pytest.raises(ValueError):
        irrigation.start_irrigation(IrrigationStatus(), "Manual Override", duration)


def test_toggle_flips_state():
    on = irrigation.toggle_irrigation(IrrigationStatus(), now=NOW)
    assert on.is_active
    off = irrigation.toggle_irrigation(on)
    assert not off.is_active


def test_planned_end_is_informational():
    active = irrigation.start_irrigation(IrrigationStatus(), "AI Schedule", 45, now=NOW)
    assert irrigation.planned_end(active) == NOW + datetime.timedelta(minutes=45)
    assert irrigation.planned_end(IrrigationStatus()) is None


def test_earlier_entry_goes_last():
    log = [_entry("a", datetime.date(2024, 6, 3)), _entry("b", datetime.date(2024, 6, 2))]
    updated = irrigation.append_log_entry(log, _entry("c", datetime.date(2024, 5, 1)))
    assert [e.id for e in updated] == ["a", "b", "c"]


def test_latest_entry_goes_first():
    log = [_entry("a", datetime.date(2024, 6, 3)), _entry("b", datetime.date(2024, 6, 2))]
    updated = irrigation.append_log_entry(log, _entry("c", datetime.date(2024, 6, 10)))
    assert [e.id for e in updated] == ["c", "a", "b"]


def test_same_date_keeps_recording_order():
    log = [_entry("a", datetime.date(2024, 6, 3))]
    updated = irrigation.append_log_entry(log, _entry("b", datetime.date(2024, 6, 3)))
    assert [e.id for e in updated] == ["a", "b"]


def test_append_does_not_mutate_input():
    log = [_entry("a", datetime.date(2024, 6, 3))]
    irrigation.append_log_entry(log, _entry("b", datetime.date(2024, 6, 4)))
    assert [e.id for e in log] == ["a"]


def test_log_entries_are_immutable():
    entry = _entry("a", datetime.date(2024, 6, 3))
    with pytest.raises(Exception):
        entry.amount_mm = 99


def test_new_log_entry_defaults():
    entry = irrigation.new_log_entry(12.5)
    assert entry.date == datetime.date.today()
    assert entry.source == "Manual Check"
    assert entry.id


def test_new_log_entry_rejects_non_positive_amount():
    with pytest.raises(ValueError):
        irrigation.new_log_entry(0)


def test_log_entry_from_plan_day():
    day = ScheduleDay(date="2024-06-02", action="Irrigate", amount_mm=8.0, reasoning="High ET0")
    entry = irrigation.log_entry_from_plan_day(day)
    assert entry.date == datetime.date(2024, 6, 2)
    assert entry.amount_mm == 8.0
    assert entry.source == "AI Recommendation"


def test_hold_day_cannot_be_logged():
    day = ScheduleDay(date="2024-06-02", action="Hold", reasoning="Rain expected")
    with pytest.raises(ValueError):
        irrigation.log_entry_from_plan_day(day)


def test_total_applied_mm():
    log = [
        _entry("a", datetime.date(2024, 6, 3), 10),
        _entry("b", datetime.date(2024, 5, 20), 5),
    ]
    assert irrigation.total_applied_mm(log) == 15
    assert irrigation.total_applied_mm(log, since=datetime.date(2024, 6, 1)) == 10
