# api/events/events_service.py

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from api.events.events_model import EventType, Meeting, Training, TrainingStatus
from utils.database_utils import as_utc, utcnow
from utils.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventInfo:
    """Read-only view over a Meeting or Training."""
    event_id: int
    event_type: EventType
    cutoff_time: datetime
    eligible_chapter_ids: List[int]
    is_active: bool


def _meeting_info(meeting: Meeting) -> EventInfo:
    return EventInfo(
        event_id=meeting.id,
        event_type=EventType.MEETING,
        cutoff_time=as_utc(meeting.late_punch_time),
        eligible_chapter_ids=list(meeting.chapter_ids or []),
        is_active=bool(meeting.is_active),
    )


def _training_info(training: Training) -> EventInfo:
    return EventInfo(
        event_id=training.id,
        event_type=EventType.TRAINING,
        cutoff_time=as_utc(training.training_date_time),
        eligible_chapter_ids=list(training.chapter_ids or []),
        is_active=bool(training.is_active),
    )


def parse_event_type(value) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        raise InvalidInputError(f"Unsupported event type: {value!r}")


class EventDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get_event(self, event_id: int, event_type: EventType) -> EventInfo:
        """
        Look up a non-deleted meeting or training.
        Raises NotFoundError when it is missing or soft-deleted.
        """
        event_type = parse_event_type(event_type)
        if event_type is EventType.MEETING:
            meeting = (
                self.db.query(Meeting)
                  .filter(Meeting.id == event_id, Meeting.is_deleted.is_(False))
                  .one_or_none()
            )
            if not meeting:
                raise NotFoundError("Meeting not found")
            return _meeting_info(meeting)

        training = (
            self.db.query(Training)
              .filter(Training.id == event_id, Training.is_deleted.is_(False))
              .one_or_none()
        )
        if not training:
            raise NotFoundError("Training not found")
        return _training_info(training)

    def list_closed_events(self, event_type: EventType, now: Optional[datetime] = None) -> List[EventInfo]:
        """
        Active, non-deleted events whose cutoff is strictly before `now`.
        """
        now = now or utcnow()
        if event_type is EventType.MEETING:
            rows = (
                self.db.query(Meeting)
                  .filter(Meeting.is_active.is_(True))
                  .filter(Meeting.is_deleted.is_(False))
                  .filter(Meeting.late_punch_time < now)
                  .order_by(Meeting.id)
                  .all()
            )
            return [_meeting_info(m) for m in rows]

        rows = (
            self.db.query(Training)
              .filter(Training.is_active.is_(True))
              .filter(Training.is_deleted.is_(False))
              .filter(Training.training_date_time < now)
              .order_by(Training.id)
              .all()
        )
        return [_training_info(t) for t in rows]

    def refresh_training_statuses(self, now: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Flip non-cancelled trainings to `upcoming` or `completed` depending
        on whether their start time has passed.

        Returns:
            (upcoming_updated, completed_updated)
        """
        now = now or utcnow()
        base = (
            self.db.query(Training)
              .filter(Training.is_active.is_(True))
              .filter(Training.is_deleted.is_(False))
              .filter(Training.status != TrainingStatus.cancelled)
        )
        upcoming = (
            base.filter(Training.training_date_time > now)
                .filter(Training.status != TrainingStatus.upcoming)
                .update({"status": TrainingStatus.upcoming, "updated_at": now}, synchronize_session=False)
        )
        completed = (
            base.filter(Training.training_date_time <= now)
                .filter(Training.status != TrainingStatus.completed)
                .update({"status": TrainingStatus.completed, "updated_at": now}, synchronize_session=False)
        )
        self.db.commit()
        logger.info("Training statuses refreshed: upcoming=%s completed=%s", upcoming, completed)
        return upcoming, completed
