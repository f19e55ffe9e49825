from datetime import timedelta

import worker_main
from api.attendance.attendance_store import AttendanceStore
from api.events.events_model import EventType
from utils.database_utils import utcnow


def test_no_flags_runs_nothing(monkeypatch):
    calls = []
    monkeypatch.setattr(worker_main, "run_attendance_backfill", lambda: calls.append("backfill"))

    assert worker_main.main([]) == 0
    assert calls == []


def test_test_flag_runs_both_jobs(db, session_factory, members, make_meeting, monkeypatch):
    meeting = make_meeting([members[0].chapter_id], late_punch_time=utcnow() - timedelta(days=1))
    monkeypatch.setattr(worker_main, "get_sessionmaker", lambda: session_factory)

    assert worker_main.main(["--test"]) == 0
    assert AttendanceStore(db).count_for_source(meeting.id, EventType.MEETING) == 3
