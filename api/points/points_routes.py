from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import role_middleware
from api.points.points_schema import (
    PointScheduleRead,
    PointValueUpdate,
    PointHistoryRead,
    PointBalancesRead,
)
from api.points.points_controller import PointsController

router = APIRouter(prefix="/points", tags=["points"])


@router.get("", response_model=List[PointScheduleRead], summary="List configured point values")
def list_points(
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return PointsController.list_schedule(db)


@router.patch(
    "/{entry_id}",
    response_model=PointScheduleRead,
    summary="Change the value of a point key",
    dependencies=[Depends(role_middleware())],
)
def update_point_value(
    entry_id: int,
    payload: PointValueUpdate,
    db: Session = Depends(get_db),
):
    return PointsController.update_value(entry_id, payload, db)


@router.get(
    "/members/{member_id}/balances",
    response_model=PointBalancesRead,
    summary="Point totals per key for a member",
)
def read_balances(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return PointsController.balances(member_id, db)


@router.get(
    "/members/{member_id}/history",
    response_model=List[PointHistoryRead],
    summary="Point history for a member, newest first",
)
def read_history(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return PointsController.history(member_id, db)
