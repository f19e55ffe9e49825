# api/attendance/attendance_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware, PrincipalKind
from middlewares.role_middleware import role_middleware
from api.attendance.attendance_schema import (
    MarkAttendanceIn,
    AdminMarkAttendanceIn,
    BulkAttendanceIn,
    UpdateAttendanceIn,
    AttendanceOut,
    MarkAttendanceOut,
    BulkAttendanceOut,
)
from api.attendance.attendance_controller import AttendanceController
from api.events.events_model import EventType

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post(
    "/mark",
    response_model=MarkAttendanceOut,
    summary="Mark my own attendance for a meeting or training",
)
def mark_attendance(
    payload: MarkAttendanceIn,
    response: Response,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
) -> MarkAttendanceOut:
    if current_user["kind"] is not PrincipalKind.member:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only members can mark their own attendance")
    out = AttendanceController.mark(payload, db, current_user["id"])
    response.status_code = status.HTTP_201_CREATED if out.created else status.HTTP_200_OK
    return out


@router.post(
    "/admin/mark",
    response_model=MarkAttendanceOut,
    summary="Record a member's attendance with an explicit status",
)
def admin_mark_attendance(
    payload: AdminMarkAttendanceIn,
    response: Response,
    db: Session = Depends(get_db),
    current_user: dict = Depends(role_middleware()),
) -> MarkAttendanceOut:
    out = AttendanceController.admin_mark(payload, db, current_user["id"])
    response.status_code = status.HTTP_201_CREATED if out.created else status.HTTP_200_OK
    return out


@router.post(
    "/admin/bulk-mark",
    response_model=BulkAttendanceOut,
    summary="Mark attendance for many members at once",
)
def admin_bulk_attendance(
    payload: BulkAttendanceIn,
    db: Session = Depends(get_db),
    current_user: dict = Depends(role_middleware()),
) -> BulkAttendanceOut:
    return AttendanceController.bulk_mark(payload, db, current_user["id"])


@router.put(
    "/update/{record_id}",
    response_model=AttendanceOut,
    summary="Correct the status or location of an attendance record",
)
def update_attendance(
    record_id: int,
    payload: UpdateAttendanceIn,
    db: Session = Depends(get_db),
    current_user: dict = Depends(role_middleware()),
) -> AttendanceOut:
    return AttendanceController.update(record_id, payload, db, current_user["id"])


@router.get(
    "/source/{source_type}/{source_id}",
    response_model=List[AttendanceOut],
    summary="List attendance for a meeting or training",
)
def list_by_source(
    source_type: EventType,
    source_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
) -> List[AttendanceOut]:
    return AttendanceController.list_by_source(source_type, source_id, db)


@router.get(
    "/member/{member_id}",
    response_model=List[AttendanceOut],
    summary="List a member's attendance",
)
def list_by_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
) -> List[AttendanceOut]:
    return AttendanceController.list_by_member(member_id, db)
