import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "testing"

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config.database import Base
from models.index import register_models
from api.events.events_model import Meeting, Training, TrainingStatus
from api.members.members_model import Chapter, Member
from api.points.points_model import PointSchedule
from api.points.points_service import PointsLedger

NOW = datetime(2026, 3, 2, 18, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    register_models()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def chapters(db):
    north = Chapter(name="North")
    south = Chapter(name="South")
    db.add_all([north, south])
    db.commit()
    return north, south


@pytest.fixture
def members(db, chapters):
    north, south = chapters
    rows = [
        Member(name="Asha", chapter_id=north.id),
        Member(name="Bala", chapter_id=north.id),
        Member(name="Chitra", chapter_id=north.id),
        Member(name="Dev", chapter_id=south.id),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def point_schedule(db):
    PointsLedger(db).seed_default_schedule()
    values = {"weekly_meetings": 10, "trainings": 5}
    for entry in db.query(PointSchedule).filter(PointSchedule.key.in_(values)).all():
        entry.value = values[entry.key]
    db.commit()
    return values


@pytest.fixture
def make_meeting(db):
    def _make(chapter_ids, late_punch_time=NOW, **kwargs):
        meeting = Meeting(
            topic=kwargs.pop("topic", "Weekly meeting"),
            chapter_ids=list(chapter_ids),
            start_date_time=late_punch_time - timedelta(minutes=15),
            end_date_time=late_punch_time + timedelta(hours=2),
            late_punch_time=late_punch_time,
            **kwargs,
        )
        db.add(meeting)
        db.commit()
        return meeting
    return _make


@pytest.fixture
def make_training(db):
    def _make(chapter_ids, training_date_time=NOW, **kwargs):
        training = Training(
            title=kwargs.pop("title", "Referral skills"),
            chapter_ids=list(chapter_ids),
            training_date_time=training_date_time,
            status=kwargs.pop("status", TrainingStatus.upcoming),
            **kwargs,
        )
        db.add(training)
        db.commit()
        return training
    return _make
