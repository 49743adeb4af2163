from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.api.dependencies import get_current_user
from app.core.database import get_async_session
from app.models.auth.user import User
from app.models.shared.enums import LeaveStatus
from app.schemas.hr.leave_schema import (
    LeaveDecisionRequest, LeaveRequestCreate, LeaveRequestCreated, LeaveRequestResponse,
)
from app.services.hr.leave_service import LeaveService

router = APIRouter()

@router.post("/", response_model=LeaveRequestCreated, status_code=201)
async def create_leave_request(
    data: LeaveRequestCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Submit a leave request; every reviewer gets a notification"""
    service = LeaveService(session)
    leave_request, fan_out = await service.create_leave_request(data, current_user.id)
    response = LeaveRequestCreated.model_validate(leave_request, from_attributes=True)
    response.notified_user_ids = fan_out.delivered
    response.failed_user_ids = fan_out.failed
    response.reviewers_unreachable = fan_out.lookup_failed
    return response

@router.get("/", response_model=List[LeaveRequestResponse])
async def list_leave_requests(
    employee_id: Optional[int] = Query(None),
    status: Optional[LeaveStatus] = Query(None),
    search: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = LeaveService(session)
    return await service.list_leave_requests(employee_id=employee_id, status=status, search=search)

@router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = LeaveService(session)
    return await service.get_leave_request(request_id)

@router.post("/{request_id}/decision", response_model=LeaveRequestResponse)
async def decide_leave_request(
    request_id: int,
    data: LeaveDecisionRequest,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Approve or reject a pending leave request"""
    service = LeaveService(session)
    return await service.decide_leave_request(
        request_id,
        data.decision,
        current_user.id,
        comment=data.comment,
        expected_version=data.expected_version,
    )
