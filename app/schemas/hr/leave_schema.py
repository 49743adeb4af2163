from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import date, datetime

from app.models.shared.enums import LeaveStatus, LeaveType
from app.schemas.hr.payroll_schema import EmployeeInfo

class LeaveRequestCreate(BaseModel):
    employee_id: int
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: Optional[str] = None

    @field_validator("leave_type", mode="before")
    @classmethod
    def parse_leave_type(cls, v):
        return LeaveType(v) if isinstance(v, str) else v

class LeaveDecisionRequest(BaseModel):
    decision: LeaveStatus
    comment: Optional[str] = None
    expected_version: Optional[int] = None

    @field_validator("decision", mode="before")
    @classmethod
    def parse_decision(cls, v):
        return LeaveStatus(v) if isinstance(v, str) else v

class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    employee: Optional[EmployeeInfo] = None
    start_date: date
    end_date: date
    duration_days: int
    leave_type: LeaveType
    reason: Optional[str] = None
    status: LeaveStatus
    reviewed_by: Optional[int] = None
    review_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    version: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class LeaveRequestCreated(LeaveRequestResponse):
    """Creation result, including which reviewers were reached"""
    notified_user_ids: list[int] = []
    failed_user_ids: list[int] = []
    reviewers_unreachable: bool = False
