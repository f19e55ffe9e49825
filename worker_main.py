# worker_main.py
"""
Worker helper that:
 - lazily creates engine/session
 - registers every model under 'api' so mappers resolve
 - runs the attendance sweep and the training status refresh
 - exposes CLI flags for manual testing
"""

import sys
import time
import logging
import argparse

from config.logging_config import setup_logging

logger = setup_logging("INFO", "worker")
logger.propagate = False

_engine = None
_SessionLocal = None


def get_engine():
    global _engine
    if _engine is None:
        try:
            from config.database import engine
        except Exception:
            logger.exception("❌ Failed to import database engine")
            raise
        _engine = engine
    return _engine


def get_sessionmaker():
    global _SessionLocal
    if _SessionLocal is None:
        from sqlalchemy.orm import sessionmaker
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def _ensure_models_registered():
    from sqlalchemy.orm import configure_mappers
    from models.index import register_models

    register_models()
    configure_mappers()
    logger.debug("✔ configure_mappers() succeeded")


def run_attendance_backfill():
    _ensure_models_registered()
    from api.tasks.attendance_backfill import BackfillScheduler

    return BackfillScheduler(get_sessionmaker()).sweep()


def run_training_status_refresh():
    _ensure_models_registered()
    from api.tasks.attendance_backfill import refresh_training_statuses

    upcoming, completed = refresh_training_statuses(get_sessionmaker())
    logger.info(f"▶️ Training status: upcoming={upcoming} completed={completed}")
    return upcoming, completed


def main(argv=None):
    parser = argparse.ArgumentParser(description="Worker helper (attendance sweep / training status)")
    parser.add_argument("--interval", type=int, help="Interval in seconds between runs (loop mode)")
    parser.add_argument("--run-backfill", action="store_true", help="Run the absent-attendance sweep once")
    parser.add_argument("--run-training", action="store_true", help="Run the training status refresh once")
    parser.add_argument("--test", action="store_true", help="Run both jobs once")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.debug:
        logger.setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if args.interval:
        logger.info(f"▶️ Worker started in loop mode (interval={args.interval}s)")
        while True:
            try:
                run_attendance_backfill()
                run_training_status_refresh()
            except Exception:
                logger.exception("❌ Worker loop error")
            time.sleep(args.interval)

    if not (args.run_backfill or args.run_training or args.test):
        logger.info("▶️ worker_main executed (no jobs run). Use --run-backfill, --run-training, --test, or --interval.")
        return 0

    if args.test or args.run_backfill:
        logger.info("▶️ Running attendance backfill")
        run_attendance_backfill()
    if args.test or args.run_training:
        logger.info("▶️ Running training status refresh")
        run_training_status_refresh()
    return 0


if __name__ == "__main__":
    sys.exit(main())
