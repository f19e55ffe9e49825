from typing import List
from sqlalchemy.orm import Session

from api.points.points_service import PointsLedger
from api.points.points_schema import (
    PointScheduleRead,
    PointValueUpdate,
    PointHistoryRead,
    PointBalancesRead,
)
from api.members.members_service import MemberDirectory


class PointsController:
    @staticmethod
    def list_schedule(db: Session) -> List[PointScheduleRead]:
        return [PointScheduleRead.model_validate(p) for p in PointsLedger(db).list_schedule()]

    @staticmethod
    def update_value(entry_id: int, payload: PointValueUpdate, db: Session) -> PointScheduleRead:
        entry = PointsLedger(db).update_schedule_value(entry_id, payload.value)
        return PointScheduleRead.model_validate(entry)

    @staticmethod
    def balances(member_id: int, db: Session) -> PointBalancesRead:
        MemberDirectory(db).get_member(member_id)
        balances = PointsLedger(db).get_balances(member_id)
        return PointBalancesRead(member_id=member_id, balances=balances, total=sum(balances.values()))

    @staticmethod
    def history(member_id: int, db: Session) -> List[PointHistoryRead]:
        return [PointHistoryRead.model_validate(h) for h in PointsLedger(db).get_history(member_id)]
