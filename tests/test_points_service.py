import pytest

from api.points.points_model import PointSchedule, UserPointHistory, UserPoints
from api.points.points_service import PointsLedger
from config.points_config import DEFAULT_POINT_SCHEDULE
from services.signals import points_awarded
from utils.errors import NotFoundError


def test_accrue_creates_balance_and_history(db, members, point_schedule):
    ledger = PointsLedger(db)

    history = ledger.accrue(members[0].id, "weekly_meetings", "MEETING", 11, remarks="MEETING Attendance Marked")

    assert history is not None
    assert history.change == 10
    assert history.remarks == "MEETING Attendance Marked"
    balance = db.query(UserPoints).filter_by(member_id=members[0].id, point_key="weekly_meetings").one()
    assert balance.total == 10


def test_accrue_adds_to_existing_balance(db, members, point_schedule):
    ledger = PointsLedger(db)

    ledger.accrue(members[0].id, "weekly_meetings", "MEETING", 1)
    ledger.accrue(members[0].id, "weekly_meetings", "MEETING", 2)
    ledger.accrue(members[0].id, "trainings", "TRAINING", 1)

    balances = ledger.get_balances(members[0].id)
    assert balances["weekly_meetings"] == 20
    assert balances["trainings"] == 5
    assert db.query(UserPoints).filter_by(member_id=members[0].id).count() == 2


def test_same_source_is_credited_once(db, members, point_schedule):
    ledger = PointsLedger(db)

    first = ledger.accrue(members[0].id, "weekly_meetings", "MEETING", 3)
    again = ledger.accrue(members[0].id, "weekly_meetings", "MEETING", 3)

    assert first is not None
    assert again is None
    assert ledger.get_balances(members[0].id)["weekly_meetings"] == 10
    assert db.query(UserPointHistory).count() == 1


def test_unconfigured_key_is_noop(db, members, point_schedule):
    ledger = PointsLedger(db)

    assert ledger.accrue(members[0].id, "no_such_key", "MEETING", 1) is None
    assert db.query(UserPoints).count() == 0


def test_inactive_key_is_noop(db, members, point_schedule):
    entry = db.query(PointSchedule).filter_by(key="trainings").one()
    entry.is_active = False
    db.commit()

    assert PointsLedger(db).accrue(members[0].id, "trainings", "TRAINING", 1) is None
    assert db.query(UserPointHistory).count() == 0


def test_balances_are_zero_filled(db, members, point_schedule):
    balances = PointsLedger(db).get_balances(members[1].id)

    assert list(balances) == [row["key"] for row in DEFAULT_POINT_SCHEDULE]
    assert set(balances.values()) == {0}


def test_history_is_newest_first(db, members, point_schedule):
    ledger = PointsLedger(db)
    ledger.accrue(members[0].id, "weekly_meetings", "MEETING", 1)
    ledger.accrue(members[0].id, "trainings", "TRAINING", 1)

    history = ledger.get_history(members[0].id)

    assert [h.point_key for h in history] == ["trainings", "weekly_meetings"]
    assert ledger.get_history(members[1].id) == []


def test_update_schedule_value(db, point_schedule):
    ledger = PointsLedger(db)
    entry = ledger.get_active_entry("weekly_meetings")

    updated = ledger.update_schedule_value(entry.id, 25)

    assert updated.value == 25
    assert ledger.get_active_entry("weekly_meetings").value == 25


def test_update_unknown_schedule_entry(db, point_schedule):
    with pytest.raises(NotFoundError, match="Point not found"):
        PointsLedger(db).update_schedule_value(9999, 1)


def test_seeding_is_idempotent(db):
    ledger = PointsLedger(db)

    assert ledger.seed_default_schedule() == len(DEFAULT_POINT_SCHEDULE)
    assert ledger.seed_default_schedule() == 0
    assert db.query(PointSchedule).count() == len(DEFAULT_POINT_SCHEDULE)


def test_seeding_keeps_configured_values(db, point_schedule):
    PointsLedger(db).seed_default_schedule()

    assert PointsLedger(db).get_active_entry("weekly_meetings").value == 10


def test_points_awarded_signal(db, members, point_schedule):
    received = []

    def listener(sender, **kwargs):
        received.append(kwargs)

    points_awarded.connect(listener)
    try:
        history = PointsLedger(db).accrue(members[2].id, "trainings", "TRAINING", 8)
        PointsLedger(db).accrue(members[2].id, "trainings", "TRAINING", 8)
    finally:
        points_awarded.disconnect(listener)

    assert received == [{
        "member_id": members[2].id,
        "point_key": "trainings",
        "change": 5,
        "history_id": history.id,
    }]
