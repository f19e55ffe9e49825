# api/tasks/attendance_backfill.py
"""
Periodic sweep that closes out events: every eligible member of a meeting
or training whose cutoff has passed gets an attendance record, defaulting
to `absent`. Safe to run repeatedly or overlapping; existing records are
never overwritten and no points are credited.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.attendance.attendance_store import AttendanceStore
from api.events.events_model import EventType
from api.events.events_service import EventDirectory, EventInfo
from api.members.members_service import MemberDirectory
from services.signals import attendance_backfilled
from utils.database_utils import utcnow

logger = logging.getLogger("worker")


@dataclass
class SweepReport:
    events_scanned: int = 0
    records_inserted: int = 0
    failed_events: List[Tuple[str, int]] = field(default_factory=list)


class BackfillScheduler:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock

    def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        now = now or self.clock()
        report = SweepReport()
        db = self.session_factory()
        try:
            for event_type in EventType:
                try:
                    events = EventDirectory(db).list_closed_events(event_type, now)
                except SQLAlchemyError:
                    db.rollback()
                    logger.exception(f"❌ Could not list closed {event_type.value} events")
                    continue

                for event in events:
                    report.events_scanned += 1
                    try:
                        inserted = self.backfill_event(db, event)
                    except SQLAlchemyError:
                        db.rollback()
                        logger.exception(f"❌ Backfill failed for {event.event_type.value} {event.event_id}")
                        report.failed_events.append((event.event_type.value, event.event_id))
                        continue
                    report.records_inserted += inserted
        finally:
            db.close()

        logger.info(
            f"▶️ Attendance sweep: scanned={report.events_scanned} "
            f"inserted={report.records_inserted} failed={len(report.failed_events)}"
        )
        return report

    def backfill_event(self, db: Session, event: EventInfo) -> int:
        member_ids = MemberDirectory(db).list_eligible_members(event.eligible_chapter_ids)
        inserted = AttendanceStore(db).bulk_upsert_absent_if_missing(
            event.event_id, event.event_type, member_ids,
        )
        if inserted:
            logger.debug(f"Marked {inserted} absent for {event.event_type.value} {event.event_id}")
            attendance_backfilled.send(self, event_id=event.event_id, event_type=event.event_type, count=inserted)
        return inserted


def refresh_training_statuses(
    session_factory: Callable[[], Session],
    now: Optional[datetime] = None,
) -> Tuple[int, int]:
    db = session_factory()
    try:
        return EventDirectory(db).refresh_training_statuses(now)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("❌ Failed to refresh training statuses")
        return 0, 0
    finally:
        db.close()
