"""
Accrual schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class AccrualDetail(BaseModel):
    user_id: int
    employee_id: str
    name: str
    casual_leave_earned: float
    casual_leave_balance: float


class AccrualFailure(BaseModel):
    user_id: int
    employee_id: Optional[str] = None
    error: str


class AccrualRunResponse(BaseModel):
    """Summary of one monthly accrual batch"""
    month: str
    processed_count: int
    skipped_count: int
    failed_count: int
    failed: List[AccrualFailure]
    details: List[AccrualDetail]


class MonthlyAccrualOut(BaseModel):
    id: int
    user_id: int
    month: date
    casual_leave_earned: Decimal
    casual_leave_balance: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
