from datetime import timedelta

from sqlalchemy.exc import OperationalError

from api.attendance.attendance_records_model import AttendanceRecord, AttendanceStatus
from api.attendance.attendance_store import AttendanceStore
from api.events.events_model import EventType, Training, TrainingStatus
from api.points.points_model import UserPointHistory
from api.tasks.attendance_backfill import BackfillScheduler, refresh_training_statuses
from api.tasks.scheduler import start_scheduler
from services.signals import attendance_backfilled

from conftest import NOW

AFTER = NOW + timedelta(minutes=10)


def statuses_for(db, event_id, event_type):
    db.expire_all()
    return {r.member_id: r.status for r in AttendanceStore(db).find_by_source(event_id, event_type)}


def test_sweep_marks_missing_members_absent(db, session_factory, members, make_meeting, point_schedule):
    a, b, c, _ = members
    meeting = make_meeting([a.chapter_id], late_punch_time=NOW)
    AttendanceStore(db).upsert(a.id, meeting.id, EventType.MEETING, AttendanceStatus.present, None, a.id)

    report = BackfillScheduler(session_factory).sweep(now=AFTER)

    assert report.events_scanned == 1
    assert report.records_inserted == 2
    assert report.failed_events == []
    assert statuses_for(db, meeting.id, EventType.MEETING) == {
        a.id: AttendanceStatus.present,
        b.id: AttendanceStatus.absent,
        c.id: AttendanceStatus.absent,
    }
    assert db.query(UserPointHistory).count() == 0


def test_sweep_never_overwrites_existing_statuses(db, session_factory, members, make_meeting):
    meeting = make_meeting([members[0].chapter_id], late_punch_time=NOW)
    store = AttendanceStore(db)
    store.upsert(members[0].id, meeting.id, EventType.MEETING, AttendanceStatus.late, None, members[0].id)
    store.upsert(members[1].id, meeting.id, EventType.MEETING, AttendanceStatus.medical, None, 900)

    BackfillScheduler(session_factory).sweep(now=AFTER)

    statuses = statuses_for(db, meeting.id, EventType.MEETING)
    assert statuses[members[0].id] == AttendanceStatus.late
    assert statuses[members[1].id] == AttendanceStatus.medical
    assert statuses[members[2].id] == AttendanceStatus.absent


def test_repeated_sweeps_insert_nothing_new(db, session_factory, members, make_meeting):
    meeting = make_meeting([members[0].chapter_id, members[3].chapter_id], late_punch_time=NOW)
    scheduler = BackfillScheduler(session_factory)

    first = scheduler.sweep(now=AFTER)
    second = scheduler.sweep(now=AFTER + timedelta(minutes=5))

    assert first.records_inserted == 4
    assert second.records_inserted == 0
    assert AttendanceStore(db).count_for_source(meeting.id, EventType.MEETING) == 4


def test_sweep_skips_ineligible_members(db, session_factory, members, make_meeting):
    members[1].is_active = False
    members[2].is_deleted = True
    db.commit()
    meeting = make_meeting([members[0].chapter_id], late_punch_time=NOW)

    BackfillScheduler(session_factory).sweep(now=AFTER)

    assert set(statuses_for(db, meeting.id, EventType.MEETING)) == {members[0].id}


def test_sweep_ignores_open_inactive_and_deleted_events(db, session_factory, members, make_meeting):
    chapter = [members[0].chapter_id]
    open_meeting = make_meeting(chapter, late_punch_time=AFTER + timedelta(hours=1))
    make_meeting(chapter, late_punch_time=NOW, is_active=False)
    make_meeting(chapter, late_punch_time=NOW, is_deleted=True)

    report = BackfillScheduler(session_factory).sweep(now=AFTER)

    assert report.events_scanned == 0
    assert db.query(AttendanceRecord).count() == 0
    assert AttendanceStore(db).count_for_source(open_meeting.id, EventType.MEETING) == 0


def test_cutoff_must_be_strictly_in_the_past(db, session_factory, members, make_meeting):
    make_meeting([members[0].chapter_id], late_punch_time=NOW)

    report = BackfillScheduler(session_factory).sweep(now=NOW)

    assert report.events_scanned == 0


def test_sweep_covers_trainings(db, session_factory, members, make_training):
    training = make_training([members[3].chapter_id], training_date_time=NOW)

    report = BackfillScheduler(session_factory).sweep(now=AFTER)

    assert report.records_inserted == 1
    assert statuses_for(db, training.id, EventType.TRAINING) == {members[3].id: AttendanceStatus.absent}


def test_soft_deleted_record_is_revived_as_absent(db, session_factory, members, make_meeting):
    meeting = make_meeting([members[0].chapter_id], late_punch_time=NOW)
    outcome = AttendanceStore(db).upsert(
        members[0].id, meeting.id, EventType.MEETING, AttendanceStatus.present, {"name": "Hall"}, 1,
    )
    outcome.record.is_deleted = True
    db.commit()

    report = BackfillScheduler(session_factory).sweep(now=AFTER)

    assert report.records_inserted == 3
    assert statuses_for(db, meeting.id, EventType.MEETING) == {
        members[0].id: AttendanceStatus.absent,
        members[1].id: AttendanceStatus.absent,
        members[2].id: AttendanceStatus.absent,
    }
    row = db.query(AttendanceRecord).filter_by(member_id=members[0].id, event_id=meeting.id).one()
    assert row.id == outcome.record.id
    assert row.is_deleted is False
    assert row.user_location is None
    assert db.query(AttendanceRecord).filter_by(event_id=meeting.id).count() == 3


def test_failed_event_does_not_stop_the_sweep(db, session_factory, members, make_meeting, monkeypatch):
    broken = make_meeting([members[0].chapter_id], late_punch_time=NOW)
    healthy = make_meeting([members[0].chapter_id], late_punch_time=NOW)
    scheduler = BackfillScheduler(session_factory)
    real_backfill = scheduler.backfill_event

    def flaky_backfill(session, event):
        if event.event_id == broken.id:
            raise OperationalError("INSERT", {}, Exception("deadlock detected"))
        return real_backfill(session, event)

    monkeypatch.setattr(scheduler, "backfill_event", flaky_backfill)
    report = scheduler.sweep(now=AFTER)

    assert report.failed_events == [("MEETING", broken.id)]
    assert report.events_scanned == 2
    assert report.records_inserted == 3
    assert AttendanceStore(db).count_for_source(healthy.id, EventType.MEETING) == 3
    assert AttendanceStore(db).count_for_source(broken.id, EventType.MEETING) == 0


def test_backfill_signal_reports_inserted_count(db, session_factory, members, make_meeting):
    meeting = make_meeting([members[0].chapter_id], late_punch_time=NOW)
    received = []

    def listener(sender, **kwargs):
        received.append(kwargs)

    attendance_backfilled.connect(listener)
    try:
        BackfillScheduler(session_factory).sweep(now=AFTER)
        BackfillScheduler(session_factory).sweep(now=AFTER)
    finally:
        attendance_backfilled.disconnect(listener)

    assert received == [{"event_id": meeting.id, "event_type": EventType.MEETING, "count": 3}]


def test_refresh_training_statuses(db, session_factory, members, make_training):
    chapter = [members[0].chapter_id]
    past = make_training(chapter, training_date_time=NOW - timedelta(days=1))
    future = make_training(chapter, training_date_time=NOW + timedelta(days=1), status=TrainingStatus.completed)
    cancelled = make_training(chapter, training_date_time=NOW - timedelta(days=2), status=TrainingStatus.cancelled)
    already_done = make_training(chapter, training_date_time=NOW - timedelta(days=3), status=TrainingStatus.completed)

    assert refresh_training_statuses(session_factory, now=NOW) == (1, 1)

    db.expire_all()
    assert db.get(Training, past.id).status == TrainingStatus.completed
    assert db.get(Training, future.id).status == TrainingStatus.upcoming
    assert db.get(Training, cancelled.id).status == TrainingStatus.cancelled
    assert db.get(Training, already_done.id).status == TrainingStatus.completed
    assert refresh_training_statuses(session_factory, now=NOW) == (0, 0)


def test_scheduler_registers_both_jobs(session_factory):
    scheduler = start_scheduler(session_factory, sweep_minutes=2, training_minutes=7, start=False)

    jobs = {job.id: job for job in scheduler.get_jobs()}

    assert set(jobs) == {"attendance_backfill", "training_status"}
    assert jobs["attendance_backfill"].trigger.interval == timedelta(minutes=2)
    assert jobs["training_status"].trigger.interval == timedelta(minutes=7)
    assert jobs["attendance_backfill"].max_instances == 1
