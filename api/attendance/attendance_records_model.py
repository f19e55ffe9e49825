from sqlalchemy import (
    Column,
    Integer,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    JSON,
    func,
    UniqueConstraint,
    Index,
)
import enum
from config.database import Base
from api.events.events_model import EventType

class AttendanceStatus(str, enum.Enum):
    present = "present"
    late    = "late"
    absent  = "absent"
    medical = "medical"
    proxy   = "proxy"

class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("member_id", "event_id", "event_type", name="uq_attendance_member_event"),
        Index("ix_attendance_event", "event_id", "event_type"),
    )

    id            = Column(Integer, primary_key=True, index=True)
    member_id     = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    # meetings.id or trainings.id depending on event_type
    event_id      = Column(Integer, nullable=False)
    event_type    = Column(Enum(EventType), nullable=False)
    status        = Column(Enum(AttendanceStatus), nullable=False)
    user_location = Column(JSON, nullable=True)
    # actor ids are member or admin ids; no FK
    created_by    = Column(Integer, nullable=True)
    updated_by    = Column(Integer, nullable=True)
    is_active     = Column(Boolean, nullable=False, default=True)
    is_deleted    = Column(Boolean, nullable=False, default=False)
    created_at    = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at    = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<AttendanceRecord(member_id={self.member_id}, event={self.event_type}:{self.event_id}, "
            f"status={self.status})>"
        )
