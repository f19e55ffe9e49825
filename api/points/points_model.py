from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, func
)
from config.database import Base

class PointSchedule(Base):
    """Configured value for each point-earning activity."""
    __tablename__ = "points"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    key         = Column(String(50), unique=True, nullable=False)
    name        = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    value       = Column(Integer, nullable=False, default=0)
    order       = Column(Integer, nullable=False, default=0)
    is_active   = Column(Boolean, nullable=False, default=True)
    is_deleted  = Column(Boolean, nullable=False, default=False)
    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at  = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<PointSchedule(key='{self.key}', value={self.value})>"


class UserPoints(Base):
    """Running total per member and point key."""
    __tablename__ = "user_points"
    __table_args__ = (
        UniqueConstraint("member_id", "point_key", name="uq_user_points_member_key"),
    )

    id         = Column(Integer, primary_key=True, autoincrement=True)
    member_id  = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    point_key  = Column(String(50), nullable=False)
    total      = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class UserPointHistory(Base):
    """Append-only audit row for every balance change."""
    __tablename__ = "user_point_history"
    __table_args__ = (
        UniqueConstraint("member_id", "point_key", "source_type", "source_id", name="uq_point_history_source"),
    )

    id          = Column(Integer, primary_key=True, autoincrement=True)
    member_id   = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    point_key   = Column(String(50), nullable=False)
    change      = Column(Integer, nullable=False)
    source_type = Column(String(50), nullable=False)
    source_id   = Column(Integer, nullable=True)
    remarks     = Column(String(255), nullable=True)
    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
