from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.api.dependencies import get_current_user
from app.core.database import get_async_session
from app.models.auth.user import User
from app.models.shared.enums import PayrollStatus
from app.schemas.hr.payroll_schema import (
    EmployeeProfileInfo, PayrollRecordCreate, PayrollRecordDetail, PayrollRecordResponse,
    PayrollRecordUpdate, PayrollRunRequest, PayrollRunResponse, PayrollSummaryResponse, PayrollTransitionRequest,
)
from app.services.dashboard.dashboard_service import DashboardService
from app.services.hr.payroll_service import PayrollService

router = APIRouter()

@router.post("/", response_model=PayrollRecordResponse, status_code=201)
async def create_payroll_record(
    data: PayrollRecordCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Create a pending payroll record; totals are computed server-side"""
    service = PayrollService(session)
    return await service.create_payroll_record(data, current_user.id)

@router.post("/run", response_model=PayrollRunResponse, status_code=201)
async def create_payroll_run(
    data: PayrollRunRequest,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """
    Open a pay run: one pending record per active employee for the period.
    Employees already on payroll for that period are skipped.
    """
    service = PayrollService(session)
    result = await service.create_payroll_run(data.period, data.entries, current_user.id)
    return PayrollRunResponse.model_validate(result, from_attributes=True)

@router.get("/", response_model=List[PayrollRecordResponse])
async def list_payroll_records(
    status: Optional[PayrollStatus] = Query(None),
    year: Optional[int] = Query(None, ge=2000),
    month: Optional[int] = Query(None, ge=1, le=12),
    search: Optional[str] = Query(None, description="Matricule, name or period"),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = PayrollService(session)
    return await service.list_payroll_records(status=status, year=year, month=month, search=search)

@router.get("/summary", response_model=PayrollSummaryResponse)
async def get_payroll_summary(
    year: Optional[int] = Query(None, ge=2000),
    month: Optional[int] = Query(None, ge=1, le=12),
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Dashboard figures: net payable and counts per status"""
    service = DashboardService(session)
    return await service.get_payroll_summary(year=year, month=month)

@router.get("/employee/{employee_id}", response_model=List[PayrollRecordResponse])
async def list_employee_payroll_records(
    employee_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = PayrollService(session)
    return await service.list_by_employee(employee_id)

@router.get("/{record_id}", response_model=PayrollRecordResponse)
async def get_payroll_record(
    record_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = PayrollService(session)
    return await service.get_payroll_record(record_id)

@router.get("/{record_id}/detail", response_model=PayrollRecordDetail)
async def get_payroll_record_detail(
    record_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Record plus the employee's contract profile"""
    service = PayrollService(session)
    detail = await service.get_payroll_record_detail(record_id)
    response = PayrollRecordDetail.model_validate(detail["record"], from_attributes=True)
    if detail["profile"] is not None:
        response.employee_profile = EmployeeProfileInfo.model_validate(detail["profile"], from_attributes=True)
    return response

@router.patch("/{record_id}", response_model=PayrollRecordResponse)
async def update_payroll_record(
    record_id: int,
    data: PayrollRecordUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Edit components or period of a pending record"""
    service = PayrollService(session)
    return await service.update_payroll_record(record_id, data, current_user.id)

@router.post("/{record_id}/transition", response_model=PayrollRecordResponse)
async def transition_payroll_status(
    record_id: int,
    data: PayrollTransitionRequest,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    """Validate or pay a payroll record"""
    service = PayrollService(session)
    return await service.transition_payroll_status(
        record_id,
        data.target_status,
        current_user.id,
        payment_method=data.payment_method,
        payment_date=data.payment_date,
        payment_reference=data.payment_reference,
        expected_version=data.expected_version,
    )

@router.delete("/{record_id}")
async def delete_payroll_record(
    record_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user)
):
    service = PayrollService(session)
    await service.delete_payroll_record(record_id, current_user.id)
    return {"message": "Payroll record deleted successfully"}
