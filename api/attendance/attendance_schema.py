# api/attendance/attendance_schema.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from api.attendance.attendance_records_model import AttendanceStatus
from api.events.events_model import EventType


class LocationIn(BaseModel):
    name: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class MarkAttendanceIn(BaseModel):
    """
    Payload for a member marking their own attendance.
    `status` is ignored for meetings (derived from the late-punch time).
    """
    source_id: int
    source_type: EventType
    status: Optional[AttendanceStatus] = None
    user_location: Optional[LocationIn] = None


class AdminMarkAttendanceIn(BaseModel):
    member_id: int
    source_id: int
    source_type: EventType
    status: AttendanceStatus
    user_location: Optional[LocationIn] = None


class BulkAttendanceIn(BaseModel):
    source_id: int
    source_type: EventType
    members: List[int] = Field(..., min_length=1)
    status: Optional[AttendanceStatus] = None


class UpdateAttendanceIn(BaseModel):
    status: Optional[AttendanceStatus] = None
    user_location: Optional[LocationIn] = None


class AttendanceOut(BaseModel):
    id: int
    member_id: int
    source_id: int = Field(..., validation_alias="event_id")
    source_type: EventType = Field(..., validation_alias="event_type")
    status: AttendanceStatus
    user_location: Optional[LocationIn] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkAttendanceOut(BaseModel):
    message: str
    created: bool
    points_awarded: int = 0
    attendance: AttendanceOut


class BulkAttendanceOut(BaseModel):
    message: str
    count: int
