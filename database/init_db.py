from config.database import SessionLocal
from models.index import init_db as create_tables
from api.points.points_service import PointsLedger


def init_db():
    create_tables()
    db = SessionLocal()
    try:
        added = PointsLedger(db).seed_default_schedule()
    finally:
        db.close()
    return added


if __name__ == "__main__":
    added = init_db()
    print(f"✅ Database initialized! ({added} point key(s) seeded)")
