from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum, JSON, func
from config.database import Base
import enum

class EventType(str, enum.Enum):
    MEETING  = "MEETING"
    TRAINING = "TRAINING"

class TrainingStatus(str, enum.Enum):
    upcoming  = "upcoming"
    completed = "completed"
    cancelled = "cancelled"


class Meeting(Base):
    __tablename__ = "meetings"

    id              = Column(Integer, primary_key=True, index=True)
    topic           = Column(Text, nullable=False)
    # chapters invited to this meeting
    chapter_ids     = Column(JSON, nullable=False, default=list)
    start_date_time = Column(DateTime(timezone=True), nullable=False)
    end_date_time   = Column(DateTime(timezone=True), nullable=False)
    # punches after this instant count as late
    late_punch_time = Column(DateTime(timezone=True), nullable=False, index=True)
    is_active       = Column(Boolean, nullable=False, default=True)
    is_deleted      = Column(Boolean, nullable=False, default=False)
    created_at      = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at      = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Meeting(id={self.id}, late_punch_time={self.late_punch_time})>"


class Training(Base):
    __tablename__ = "trainings"

    id                 = Column(Integer, primary_key=True, index=True)
    title              = Column(String(200), nullable=False)
    chapter_ids        = Column(JSON, nullable=False, default=list)
    training_date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status             = Column(Enum(TrainingStatus), nullable=False, default=TrainingStatus.upcoming)
    is_active          = Column(Boolean, nullable=False, default=True)
    is_deleted         = Column(Boolean, nullable=False, default=False)
    created_at         = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at         = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Training(id={self.id}, status={self.status})>"
