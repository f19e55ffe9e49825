# api/points/points_service.py

import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.points.points_model import PointSchedule, UserPoints, UserPointHistory
from config.points_config import DEFAULT_POINT_SCHEDULE
from services.signals import points_awarded
from utils.database_utils import DatabaseUtils

logger = logging.getLogger(__name__)


class PointsLedger:
    def __init__(self, db: Session):
        self.db = db

    def get_active_entry(self, point_key: str) -> Optional[PointSchedule]:
        return (
            self.db.query(PointSchedule)
              .filter(PointSchedule.key == point_key)
              .filter(PointSchedule.is_active.is_(True))
              .filter(PointSchedule.is_deleted.is_(False))
              .one_or_none()
        )

    def stage(
        self,
        member_id: int,
        point_key: str,
        source_type: str,
        source_id: Optional[int],
        remarks: Optional[str] = None,
    ) -> Optional[UserPointHistory]:
        """
        Apply the balance increment and add the history row inside the
        current transaction, without committing. Returns None when the key
        is not configured. A duplicate source raises IntegrityError on flush.
        """
        entry = self.get_active_entry(point_key)
        if not entry:
            logger.info("No active point entry for %r; skipping accrual for member %s", point_key, member_id)
            return None

        stmt = DatabaseUtils.dialect_insert(self.db, UserPoints).values(
            member_id=member_id,
            point_key=point_key,
            total=entry.value,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["member_id", "point_key"],
            set_={
                "total": UserPoints.total + stmt.excluded.total,
                "updated_at": func.now(),
            },
        )
        self.db.execute(stmt)

        history = UserPointHistory(
            member_id=member_id,
            point_key=point_key,
            change=entry.value,
            source_type=source_type,
            source_id=source_id,
            remarks=remarks,
        )
        self.db.add(history)
        self.db.flush()
        return history

    def announce(self, history: UserPointHistory) -> None:
        """Send `points_awarded` for a committed history row."""
        points_awarded.send(
            self,
            member_id=history.member_id,
            point_key=history.point_key,
            change=history.change,
            history_id=history.id,
        )

    def accrue(
        self,
        member_id: int,
        point_key: str,
        source_type: str,
        source_id: Optional[int],
        remarks: Optional[str] = None,
    ) -> Optional[UserPointHistory]:
        """
        Credit `member_id` with the configured value of `point_key`.

        The balance increment and the history row are committed together.
        Returns the history row, or None when the key is not configured or
        this source was already credited.
        """
        try:
            history = self.stage(member_id, point_key, source_type, source_id, remarks)
            if history is None:
                return None
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "Points for %s %s already credited to member %s (%s)",
                source_type, source_id, member_id, point_key,
            )
            return None

        self.db.refresh(history)
        self.announce(history)
        return history

    def get_balances(self, member_id: int) -> Dict[str, int]:
        """
        Totals for every configured point key; keys never credited are 0.
        """
        keys = [e.key for e in self.list_schedule()]
        totals = dict(
            self.db.query(UserPoints.point_key, UserPoints.total)
              .filter(UserPoints.member_id == member_id)
              .all()
        )
        return {key: totals.get(key, 0) for key in keys}

    def get_history(self, member_id: int) -> List[UserPointHistory]:
        return (
            self.db.query(UserPointHistory)
              .filter(UserPointHistory.member_id == member_id)
              .order_by(UserPointHistory.created_at.desc(), UserPointHistory.id.desc())
              .all()
        )

    def list_schedule(self) -> List[PointSchedule]:
        return (
            self.db.query(PointSchedule)
              .filter(PointSchedule.is_active.is_(True))
              .filter(PointSchedule.is_deleted.is_(False))
              .order_by(PointSchedule.order.asc())
              .all()
        )

    def update_schedule_value(self, entry_id: int, value: int) -> PointSchedule:
        entry = DatabaseUtils.get_or_404(self.db, PointSchedule, detail="Point not found", id=entry_id, is_deleted=False)
        entry.value = value
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def seed_default_schedule(self) -> int:
        """Insert missing default point keys. Returns how many were added."""
        added = DatabaseUtils.insert_ignore_conflicts(
            self.db, PointSchedule, [dict(row) for row in DEFAULT_POINT_SCHEDULE], ["key"],
        )
        self.db.commit()
        return added
