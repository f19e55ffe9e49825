from typing import Iterable, List
from sqlalchemy.orm import Session

from api.members.members_model import Member
from utils.errors import NotFoundError


class MemberDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get_member(self, member_id: int) -> Member:
        member = (
            self.db.query(Member)
              .filter(Member.id == member_id, Member.is_deleted.is_(False))
              .one_or_none()
        )
        if not member:
            raise NotFoundError("Member not found")
        return member

    def require_members(self, member_ids: Iterable[int]) -> List[int]:
        """
        Check every id in one query. Raises NotFoundError naming the ids
        that are unknown or soft-deleted.
        """
        member_ids = list(dict.fromkeys(member_ids))
        if not member_ids:
            return []
        found = {
            r.id
            for r in self.db.query(Member.id)
              .filter(Member.id.in_(member_ids))
              .filter(Member.is_deleted.is_(False))
              .all()
        }
        missing = [m for m in member_ids if m not in found]
        if missing:
            raise NotFoundError(f"Member not found: {', '.join(str(m) for m in missing)}")
        return member_ids

    def list_eligible_members(self, chapter_ids: Iterable[int]) -> List[int]:
        """Ids of active, non-deleted members belonging to any of `chapter_ids`."""
        chapter_ids = list(chapter_ids)
        if not chapter_ids:
            return []
        rows = (
            self.db.query(Member.id)
              .filter(Member.chapter_id.in_(chapter_ids))
              .filter(Member.is_active.is_(True))
              .filter(Member.is_deleted.is_(False))
              .order_by(Member.id)
              .all()
        )
        return [r.id for r in rows]
