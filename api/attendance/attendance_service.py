# api/attendance/attendance_service.py

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.attendance.attendance_records_model import AttendanceRecord, AttendanceStatus
from api.attendance.attendance_store import AttendanceStore
from api.events.events_model import EventType
from api.events.events_service import EventDirectory, EventInfo, parse_event_type
from api.members.members_service import MemberDirectory
from api.points.points_model import UserPointHistory
from api.points.points_service import PointsLedger
from config.points_config import ATTENDANCE_POINT_KEYS
from services.signals import attendance_marked
from utils.database_utils import utcnow
from utils.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)


@dataclass
class MarkResult:
    record: AttendanceRecord
    created: bool
    points_awarded: int = 0


def derive_meeting_status(cutoff: datetime, now: datetime) -> AttendanceStatus:
    """Punches strictly after the late-punch time are late."""
    return AttendanceStatus.late if now > cutoff else AttendanceStatus.present


class AttendanceMarker:
    """
    Attendance use cases. Marking creates or updates the single record for
    (member, event) and credits points the first time a member is present.
    """

    def __init__(
        self,
        db: Session,
        store: Optional[AttendanceStore] = None,
        ledger: Optional[PointsLedger] = None,
        events: Optional[EventDirectory] = None,
        members: Optional[MemberDirectory] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.store = store or AttendanceStore(db)
        self.ledger = ledger or PointsLedger(db)
        self.events = events or EventDirectory(db)
        self.members = members or MemberDirectory(db)
        self.clock = clock

    # ── marking ────────────────────────────────────────────────────────────

    def mark_self(
        self,
        member_id: int,
        event_id: int,
        event_type: EventType,
        requested_status: Optional[AttendanceStatus] = None,
        location: Optional[Dict[str, Any]] = None,
    ) -> MarkResult:
        """
        A member punches in for themselves. Meeting status is derived from
        the late-punch time; training status is taken from the request.
        """
        event = self.events.get_event(event_id, event_type)
        if event.event_type is EventType.MEETING:
            status = derive_meeting_status(event.cutoff_time, self.clock())
        else:
            status = requested_status or AttendanceStatus.present
        return self._record(event, member_id, status, location, actor_id=member_id)

    def mark_as_admin(
        self,
        actor_id: int,
        member_id: int,
        event_id: int,
        event_type: EventType,
        status: AttendanceStatus,
        location: Optional[Dict[str, Any]] = None,
    ) -> MarkResult:
        """An admin records a status verbatim for one member."""
        event = self.events.get_event(event_id, event_type)
        self.members.get_member(member_id)
        return self._record(event, member_id, status, location, actor_id=actor_id)

    def _record(
        self,
        event: EventInfo,
        member_id: int,
        status: AttendanceStatus,
        location: Optional[Dict[str, Any]],
        actor_id: int,
    ) -> MarkResult:
        # a new record and its points commit together or not at all
        history = None
        try:
            outcome = self.store.upsert(
                member_id=member_id,
                event_id=event.event_id,
                event_type=event.event_type,
                status=status,
                location=location,
                actor_id=actor_id,
                commit=False,
            )
            if outcome.created and status == AttendanceStatus.present:
                history = self._stage_points(outcome.record)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to store attendance for member %s on %s %s", member_id, event.event_type.value, event.event_id)
            raise StoreError("Could not save attendance, please try again")

        self.db.refresh(outcome.record)
        result = MarkResult(record=outcome.record, created=outcome.created)
        if history is not None:
            result.points_awarded = history.change
            self.ledger.announce(history)

        attendance_marked.send(self, record_id=outcome.record.id, created=outcome.created, status=status)
        return result

    def _stage_points(self, record: AttendanceRecord) -> Optional[UserPointHistory]:
        point_key = ATTENDANCE_POINT_KEYS[record.event_type.value]
        return self.ledger.stage(
            member_id=record.member_id,
            point_key=point_key.value,
            source_type=record.event_type.value,
            source_id=record.id,
            remarks=f"{record.event_type.value} Attendance Marked",
        )

    def mark_bulk(
        self,
        actor_id: int,
        event_id: int,
        event_type: EventType,
        member_ids: Iterable[int],
        status: Optional[AttendanceStatus] = None,
    ) -> int:
        """
        Admin bulk attendance. Creates or overwrites one record per member.
        Never credits points.
        """
        event = self.events.get_event(event_id, event_type)
        member_ids = self.members.require_members(member_ids)
        status = status or AttendanceStatus.present
        try:
            count = self.store.bulk_upsert(
                event_id=event.event_id,
                event_type=event.event_type,
                member_ids=member_ids,
                status=status,
                actor_id=actor_id,
            )
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Bulk attendance failed for %s %s", event.event_type.value, event.event_id)
            raise StoreError("Could not save attendance, please try again")
        logger.info("Bulk attendance: %s member(s) marked %s for %s %s", count, status.value, event.event_type.value, event.event_id)
        return count

    def update_record(
        self,
        record_id: int,
        actor_id: int,
        status: Optional[AttendanceStatus] = None,
        location: Optional[Dict[str, Any]] = None,
    ) -> AttendanceRecord:
        record = self.store.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance not found")
        try:
            return self.store.update(record, status, location, actor_id)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to update attendance %s", record_id)
            raise StoreError("Could not save attendance, please try again")

    # ── reads ──────────────────────────────────────────────────────────────

    def list_by_source(self, event_id: int, event_type: EventType) -> List[AttendanceRecord]:
        return self.store.find_by_source(event_id, parse_event_type(event_type))

    def list_by_member(self, member_id: int) -> List[AttendanceRecord]:
        return self.store.find_by_member(member_id)
