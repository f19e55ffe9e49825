"""
Database utilities and common operations to reduce code duplication
"""
from datetime import datetime, timezone
from typing import Type, TypeVar, Optional, List, Any, Dict, Sequence
from sqlalchemy.orm import Session
from sqlalchemy.dialects import postgresql, sqlite

from utils.errors import NotFoundError

T = TypeVar('T')


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    SQLite hands back naive datetimes even for timezone-aware columns;
    everything is stored in UTC, so naive values are tagged as UTC.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class DatabaseUtils:
    """Utility class for common database operations"""

    @staticmethod
    def get_or_404(db: Session, model_class: Type[T], detail: Optional[str] = None, **filters) -> T:
        """
        Get a single object by filters or raise NotFoundError

        Args:
            db: Database session
            model_class: SQLAlchemy model class
            detail: Message for the error (defaults to "<Model> not found")
            **filters: Filter conditions

        Returns:
            Model instance

        Raises:
            NotFoundError: if object not found
        """
        obj = db.query(model_class).filter_by(**filters).first()
        if not obj:
            raise NotFoundError(detail or f"{model_class.__name__} not found")
        return obj

    @staticmethod
    def exists(db: Session, model_class: Type[T], **filters) -> bool:
        """
        Check if object exists with given filters
        """
        return db.query(
            db.query(model_class).filter_by(**filters).exists()
        ).scalar()

    @staticmethod
    def dialect_insert(db: Session, model_class: Type[T]):
        """
        Return the dialect-specific INSERT construct for `model_class` so
        callers can attach ON CONFLICT clauses.

        Raises:
            NotImplementedError: for backends without ON CONFLICT support
        """
        name = db.get_bind().dialect.name
        if name == "postgresql":
            return postgresql.insert(model_class)
        if name == "sqlite":
            return sqlite.insert(model_class)
        raise NotImplementedError(f"ON CONFLICT inserts are not supported on {name!r}")

    @staticmethod
    def insert_ignore_conflicts(
        db: Session,
        model_class: Type[T],
        rows: List[Dict[str, Any]],
        index_elements: Sequence[str],
    ) -> int:
        """
        Insert all rows in a single statement, silently skipping rows that
        collide with the unique index on `index_elements`.

        Does not commit.

        Returns:
            Number of rows actually inserted
        """
        if not rows:
            return 0
        stmt = (
            DatabaseUtils.dialect_insert(db, model_class)
            .values(rows)
            .on_conflict_do_nothing(index_elements=list(index_elements))
        )
        result = db.execute(stmt)
        return result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)
