# api/attendance/attendance_store.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, null
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.attendance.attendance_records_model import AttendanceRecord, AttendanceStatus
from api.events.events_model import EventType
from utils.database_utils import DatabaseUtils, utcnow

logger = logging.getLogger(__name__)

KEY_COLUMNS = ("member_id", "event_id", "event_type")


@dataclass
class UpsertOutcome:
    record: AttendanceRecord
    created: bool


class AttendanceStore:
    """
    Persistence for attendance records. One row per
    (member_id, event_id, event_type), enforced by uq_attendance_member_event.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find(
        self,
        member_id: int,
        event_id: int,
        event_type: EventType,
        include_deleted: bool = False,
    ) -> Optional[AttendanceRecord]:
        query = (
            self.db.query(AttendanceRecord)
              .filter_by(member_id=member_id, event_id=event_id, event_type=event_type)
        )
        if not include_deleted:
            query = query.filter(AttendanceRecord.is_deleted.is_(False))
        return query.one_or_none()

    def _apply_update(
        self,
        record: AttendanceRecord,
        status: AttendanceStatus,
        location: Optional[Dict[str, Any]],
        actor_id: Optional[int],
    ) -> None:
        record.status = status
        record.user_location = location
        record.updated_by = actor_id
        record.updated_at = utcnow()
        record.is_deleted = False

    def _finish(self, record: AttendanceRecord, commit: bool) -> None:
        if commit:
            self.db.commit()
            self.db.refresh(record)
        else:
            self.db.flush()

    def upsert(
        self,
        member_id: int,
        event_id: int,
        event_type: EventType,
        status: AttendanceStatus,
        location: Optional[Dict[str, Any]],
        actor_id: Optional[int],
        commit: bool = True,
    ) -> UpsertOutcome:
        """
        With commit=False the row is only flushed; the caller owns the
        transaction and must commit or roll back.
        """
        existing = self._find(member_id, event_id, event_type)
        if existing:
            self._apply_update(existing, status, location, actor_id)
            self._finish(existing, commit)
            return UpsertOutcome(existing, created=False)

        record = AttendanceRecord(
            member_id=member_id,
            event_id=event_id,
            event_type=event_type,
            status=status,
            user_location=location,
            created_by=actor_id,
            is_active=True,
            is_deleted=False,
        )
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError:
            # Another writer holds the key (concurrent mark or a soft-deleted row)
            self.db.rollback()
            logger.info(
                "Attendance key (%s, %s, %s) already taken; updating existing row",
                member_id, event_type, event_id,
            )
            existing = self._find(member_id, event_id, event_type, include_deleted=True)
            if existing is None:
                raise
            self._apply_update(existing, status, location, actor_id)
            self._finish(existing, commit)
            return UpsertOutcome(existing, created=False)

        self._finish(record, commit)
        return UpsertOutcome(record, created=True)

    def bulk_upsert_absent_if_missing(
        self,
        event_id: int,
        event_type: EventType,
        member_ids: Iterable[int],
    ) -> int:
        """
        Give every member without a live record for this event an `absent`
        row. A key held only by a soft-deleted row is revived as `absent`.
        Live rows are never touched.

        Returns the number of rows inserted or revived.
        """
        member_ids = list(dict.fromkeys(member_ids))
        if not member_ids:
            return 0

        live = {
            row.member_id
            for row in self.db.query(AttendanceRecord.member_id)
              .filter_by(event_id=event_id, event_type=event_type)
              .filter(AttendanceRecord.member_id.in_(member_ids))
              .filter(AttendanceRecord.is_deleted.is_(False))
              .all()
        }
        now = utcnow()
        rows = [
            {
                "member_id": member_id,
                "event_id": event_id,
                "event_type": event_type,
                "status": AttendanceStatus.absent,
                "is_active": True,
                "is_deleted": False,
                "created_at": now,
                "updated_at": now,
            }
            for member_id in member_ids
            if member_id not in live
        ]
        if not rows:
            return 0

        stmt = DatabaseUtils.dialect_insert(self.db, AttendanceRecord).values(rows)
        # a live row that appeared since the select above is left alone
        stmt = stmt.on_conflict_do_update(
            index_elements=list(KEY_COLUMNS),
            set_={
                "status": AttendanceStatus.absent,
                "user_location": null(),
                "updated_by": None,
                "updated_at": stmt.excluded.updated_at,
                "is_deleted": False,
            },
            where=AttendanceRecord.is_deleted.is_(True),
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)

    def bulk_upsert(
        self,
        event_id: int,
        event_type: EventType,
        member_ids: Iterable[int],
        status: AttendanceStatus,
        actor_id: Optional[int],
    ) -> int:
        """
        Set `status` for every member in one statement, creating rows that
        do not exist yet and reviving soft-deleted ones.
        """
        member_ids = list(dict.fromkeys(member_ids))
        if not member_ids:
            return 0

        now = utcnow()
        rows = [
            {
                "member_id": member_id,
                "event_id": event_id,
                "event_type": event_type,
                "status": status,
                "created_by": actor_id,
                "updated_by": actor_id,
                "is_active": True,
                "is_deleted": False,
                "created_at": now,
                "updated_at": now,
            }
            for member_id in member_ids
        ]
        stmt = DatabaseUtils.dialect_insert(self.db, AttendanceRecord).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(KEY_COLUMNS),
            set_={
                "status": stmt.excluded.status,
                "updated_by": stmt.excluded.updated_by,
                "updated_at": stmt.excluded.updated_at,
                "is_deleted": False,
            },
        )
        self.db.execute(stmt)
        self.db.commit()
        return len(rows)

    def update(
        self,
        record: AttendanceRecord,
        status: Optional[AttendanceStatus],
        location: Optional[Dict[str, Any]],
        actor_id: Optional[int],
    ) -> AttendanceRecord:
        if status is not None:
            record.status = status
        if location is not None:
            record.user_location = location
        record.updated_by = actor_id
        record.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(record)
        return record

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
              .filter(AttendanceRecord.id == record_id, AttendanceRecord.is_deleted.is_(False))
              .one_or_none()
        )

    def find_by_source(self, event_id: int, event_type: EventType) -> List[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
                .filter_by(event_id=event_id, event_type=event_type)
                .filter(AttendanceRecord.is_deleted.is_(False))
                .order_by(AttendanceRecord.member_id.asc())
                .all()
        )

    def find_by_member(self, member_id: int) -> List[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
                .filter_by(member_id=member_id)
                .filter(AttendanceRecord.is_deleted.is_(False))
                .order_by(AttendanceRecord.created_at.desc(), AttendanceRecord.id.desc())
                .all()
        )

    def count_for_source(self, event_id: int, event_type: EventType) -> int:
        return (
            self.db.query(func.count(AttendanceRecord.id))
              .filter_by(event_id=event_id, event_type=event_type)
              .scalar()
        )
