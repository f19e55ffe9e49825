# api/attendance/attendance_controller.py

from typing import List, Optional
from sqlalchemy.orm import Session

from api.attendance.attendance_service import AttendanceMarker
from api.attendance.attendance_schema import (
    LocationIn,
    MarkAttendanceIn,
    AdminMarkAttendanceIn,
    BulkAttendanceIn,
    UpdateAttendanceIn,
    AttendanceOut,
    MarkAttendanceOut,
    BulkAttendanceOut,
)
from api.events.events_model import EventType


def _location(loc: Optional[LocationIn]) -> Optional[dict]:
    return loc.model_dump(exclude_none=True) if loc else None


class AttendanceController:
    @staticmethod
    def mark(
        payload: MarkAttendanceIn,
        db: Session,
        current_user_id: int,
    ) -> MarkAttendanceOut:
        svc = AttendanceMarker(db)
        result = svc.mark_self(
            member_id=current_user_id,
            event_id=payload.source_id,
            event_type=payload.source_type,
            requested_status=payload.status,
            location=_location(payload.user_location),
        )
        return MarkAttendanceOut(
            message="Attendance marked successfully" if result.created else "Attendance updated successfully",
            created=result.created,
            points_awarded=result.points_awarded,
            attendance=AttendanceOut.model_validate(result.record),
        )

    @staticmethod
    def admin_mark(
        payload: AdminMarkAttendanceIn,
        db: Session,
        current_user_id: int,
    ) -> MarkAttendanceOut:
        svc = AttendanceMarker(db)
        result = svc.mark_as_admin(
            actor_id=current_user_id,
            member_id=payload.member_id,
            event_id=payload.source_id,
            event_type=payload.source_type,
            status=payload.status,
            location=_location(payload.user_location),
        )
        return MarkAttendanceOut(
            message="Attendance marked successfully" if result.created else "Attendance updated successfully",
            created=result.created,
            points_awarded=result.points_awarded,
            attendance=AttendanceOut.model_validate(result.record),
        )

    @staticmethod
    def bulk_mark(
        payload: BulkAttendanceIn,
        db: Session,
        current_user_id: int,
    ) -> BulkAttendanceOut:
        svc = AttendanceMarker(db)
        count = svc.mark_bulk(
            actor_id=current_user_id,
            event_id=payload.source_id,
            event_type=payload.source_type,
            member_ids=payload.members,
            status=payload.status,
        )
        status = (payload.status.value if payload.status else "present")
        return BulkAttendanceOut(message=f"Bulk attendance marked as {status}", count=count)

    @staticmethod
    def update(
        record_id: int,
        payload: UpdateAttendanceIn,
        db: Session,
        current_user_id: int,
    ) -> AttendanceOut:
        svc = AttendanceMarker(db)
        rec = svc.update_record(
            record_id=record_id,
            actor_id=current_user_id,
            status=payload.status,
            location=_location(payload.user_location),
        )
        return AttendanceOut.model_validate(rec)

    @staticmethod
    def list_by_source(
        source_type: EventType,
        source_id: int,
        db: Session,
    ) -> List[AttendanceOut]:
        svc = AttendanceMarker(db)
        return [AttendanceOut.model_validate(r) for r in svc.list_by_source(source_id, source_type)]

    @staticmethod
    def list_by_member(
        member_id: int,
        db: Session,
    ) -> List[AttendanceOut]:
        svc = AttendanceMarker(db)
        return [AttendanceOut.model_validate(r) for r in svc.list_by_member(member_id)]
