from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional
from datetime import datetime


class PointScheduleRead(BaseModel):
    id: int
    key: str
    name: str
    description: Optional[str] = None
    value: int
    order: int

    model_config = ConfigDict(from_attributes=True)


class PointValueUpdate(BaseModel):
    value: int = Field(..., ge=0)


class PointHistoryRead(BaseModel):
    id: int
    member_id: int
    point_key: str
    change: int
    source_type: str
    source_id: Optional[int] = None
    remarks: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PointBalancesRead(BaseModel):
    member_id: int
    balances: Dict[str, int]
    total: int
