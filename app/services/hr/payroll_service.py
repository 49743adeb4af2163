import logging
from typing import Any, Dict, List, Optional, Sequence
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import BaseAppException, ConcurrentModificationError, InvalidTransitionError, ValidationError
from app.core.logging import log_user_action
from app.db.gateway import PersistenceGateway
from app.models.hr.employee import Employee
from app.models.hr.payroll_record import PayrollRecord
from app.models.shared.enums import PayrollStatus, PaymentMethod
from app.schemas.hr.payroll_schema import (
    DeductionComponents, GrossComponents, PayrollPeriod, PayrollRecordCreate, PayrollRecordUpdate, PayrollRunEntry,
)
from app.services.dashboard.aggregation import filter_by_free_text
from app.services.hr.payroll_calculator import (
    DEDUCTION_FIELDS, GROSS_FIELDS, breakdown_for_record, compute_breakdown,
)
from app.services.hr.payroll_state_machine import PaymentStateMachine

logger = logging.getLogger(__name__)

TABLE = PayrollRecord.__tablename__
RECORD_OPTIONS = (selectinload(PayrollRecord.employee),)
DETAIL_OPTIONS = (selectinload(PayrollRecord.employee).selectinload(Employee.profile),)
SEARCH_FIELDS = ("employee.employee_code", "employee.first_name", "employee.last_name", "period_label")

class PayrollService:
    def __init__(self, session: AsyncSession, state_machine: Optional[PaymentStateMachine] = None):
        self.session = session
        self.gateway = PersistenceGateway(session)
        self.state_machine = state_machine or PaymentStateMachine()

    # region ========== Create / Read ==========

    async def create_payroll_record(self, data: PayrollRecordCreate, current_user_id: int) -> PayrollRecord:
        """Create a pending payroll record; totals are always computed here"""
        employee = await self.gateway.get(Employee.__tablename__, data.employee_id, label="Employee")
        if not employee.is_active:
            raise ValidationError(f"Employee {employee.employee_code} is inactive", field="employee_id")

        # One record per employee per period
        existing = await self.gateway.select_one(
            TABLE,
            PayrollRecord.employee_id == data.employee_id,
            PayrollRecord.period_year == data.period.year,
            PayrollRecord.period_month == data.period.month,
        )
        if existing:
            raise ValidationError(
                f"Payroll already created for {employee.employee_code} in {data.period.label}",
                field="period",
            )

        return await self._insert_record(employee, data.period, data.gross, data.deductions, current_user_id)

    async def create_payroll_run(
        self,
        period: PayrollPeriod,
        entries: Sequence[PayrollRunEntry],
        current_user_id: int,
    ) -> Dict[str, Any]:
        """
        Open a pay run: one pending record per active employee for the period.

        Amounts come from the employee's entry; employees without one start at
        zero and are completed by editing while pending. Employees that already
        have a record for the period are skipped, and an employee whose amounts
        are rejected is reported without stopping the rest of the run.
        """
        employees = await self.gateway.select_many(
            Employee.__tablename__, Employee.is_active == True, order_by=(Employee.id,)
        )
        entries_by_employee = {entry.employee_id: entry for entry in entries}
        already_recorded = {record.employee_id for record in await self.list_by_period(period.year, period.month)}

        stats = {
            "period_year": period.year,
            "period_month": period.month,
            "created": [],
            "skipped_employee_ids": [],
            "failed": [],
            "total_gross": 0,
            "total_net_payable": 0,
        }

        active_ids = {employee.id for employee in employees}
        for employee_id in sorted(set(entries_by_employee) - active_ids):
            stats["failed"].append({"employee_id": employee_id, "error": "Employee not found or inactive"})

        for employee in employees:
            if employee.id in already_recorded:
                stats["skipped_employee_ids"].append(employee.id)
                logger.info(f"Skipped {employee.employee_code} - payroll already exists for {period.label}")
                continue

            entry = entries_by_employee.get(employee.id) or PayrollRunEntry(employee_id=employee.id)
            try:
                record = await self._insert_record(employee, period, entry.gross, entry.deductions, current_user_id)
            except BaseAppException as e:
                stats["failed"].append({"employee_id": employee.id, "error": e.message})
                continue

            stats["created"].append(record)
            stats["total_gross"] += record.gross_total
            stats["total_net_payable"] += record.net_payable

        log_user_action(
            current_user_id, "RUN", "payroll_record", None,
            period=period.label, created=len(stats["created"]), skipped=len(stats["skipped_employee_ids"]),
        )
        logger.info(
            f"Payroll run for {period.label} | Created: {len(stats['created'])} | "
            f"Failed: {len(stats['failed'])} | Skipped: {len(stats['skipped_employee_ids'])}"
        )
        return stats

    async def _insert_record(
        self,
        employee: Employee,
        period: PayrollPeriod,
        gross: GrossComponents,
        deductions: DeductionComponents,
        current_user_id: int,
    ) -> PayrollRecord:
        breakdown = compute_breakdown(gross, deductions)

        record_id = await self.gateway.insert(TABLE, {
            "employee_id": employee.id,
            "period_year": period.year,
            "period_month": period.month,
            **gross.model_dump(),
            **deductions.model_dump(),
            **breakdown.as_dict(),
            "status": PayrollStatus.PENDING,
            "created_by": current_user_id,
        })

        log_user_action(current_user_id, "CREATE", "payroll_record", record_id, net_payable=breakdown.net_payable)
        logger.info(
            f"Payroll created for {employee.employee_code} on {period.label} | "
            f"Gross: {breakdown.gross_total} | Deductions: {breakdown.total_deductions} | Net: {breakdown.net_payable}"
        )
        return await self.get_payroll_record(record_id)

    async def get_payroll_record(self, record_id: int) -> PayrollRecord:
        record = await self.gateway.get(TABLE, record_id, options=RECORD_OPTIONS, label="Payroll record")
        self._check_totals(record)
        return record

    async def get_payroll_record_detail(self, record_id: int) -> Dict[str, Any]:
        """Record with the employee's contract profile, the payslip data source"""
        record = await self.gateway.get(TABLE, record_id, options=DETAIL_OPTIONS, label="Payroll record")
        self._check_totals(record)
        return {"record": record, "profile": record.employee.profile if record.employee else None}

    async def list_by_employee(self, employee_id: int) -> List[PayrollRecord]:
        records = await self.gateway.select_many(
            TABLE,
            PayrollRecord.employee_id == employee_id,
            order_by=(PayrollRecord.period_year.desc(), PayrollRecord.period_month.desc()),
            options=RECORD_OPTIONS,
        )
        return self._checked(records)

    async def list_by_period(self, year: int, month: int) -> List[PayrollRecord]:
        records = await self.gateway.select_many(
            TABLE,
            PayrollRecord.period_year == year,
            PayrollRecord.period_month == month,
            order_by=(PayrollRecord.employee_id,),
            options=RECORD_OPTIONS,
        )
        return self._checked(records)

    async def list_payroll_records(
        self,
        status: Optional[PayrollStatus] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[PayrollRecord]:
        """All records, newest first, with optional status/period/free-text filters"""
        conditions = []
        if status:
            conditions.append(PayrollRecord.status == status)
        if year:
            conditions.append(PayrollRecord.period_year == year)
        if month:
            conditions.append(PayrollRecord.period_month == month)

        records = await self.gateway.select_many(
            TABLE,
            *conditions,
            order_by=(PayrollRecord.created_at.desc(), PayrollRecord.id.desc()),
            options=RECORD_OPTIONS,
        )
        records = self._checked(records)
        if search:
            records = filter_by_free_text(records, search, SEARCH_FIELDS)
        return records

    # endregion

    # region ========== Update / Transition / Delete ==========

    async def update_payroll_record(
        self, record_id: int, data: PayrollRecordUpdate, current_user_id: int,
        expected_version: Optional[int] = None,
    ) -> PayrollRecord:
        """Edit components or period while the record is still pending"""
        record = await self.get_payroll_record(record_id)
        if expected_version is None:
            expected_version = data.expected_version

        if not self.state_machine.is_editable(record.status):
            raise InvalidTransitionError(
                record.status.value, record.status.value,
                f"Payroll record is {record.status.value} and can no longer be edited",
            )

        changes = data.changes()
        if not changes:
            if expected_version is not None and expected_version != record.version:
                raise ConcurrentModificationError(TABLE, record_id, expected_version)
            return record

        if "period_year" in changes:
            clash = await self.gateway.select_one(
                TABLE,
                PayrollRecord.employee_id == record.employee_id,
                PayrollRecord.period_year == changes["period_year"],
                PayrollRecord.period_month == changes["period_month"],
                PayrollRecord.id != record_id,
            )
            if clash:
                raise ValidationError("Another payroll record already covers that period", field="period")

        components = {field: getattr(record, field) for field in GROSS_FIELDS + DEDUCTION_FIELDS}
        components.update({k: v for k, v in changes.items() if k in components})
        breakdown = compute_breakdown(components, components)

        updated = await self.gateway.update(
            TABLE,
            record_id,
            {**changes, **breakdown.as_dict(), "updated_by": current_user_id},
            expected_version=expected_version if expected_version is not None else record.version,
            options=RECORD_OPTIONS,
        )
        log_user_action(current_user_id, "UPDATE", "payroll_record", record_id, fields=",".join(sorted(changes)))
        return updated

    async def transition_payroll_status(
        self,
        record_id: int,
        target_status: PayrollStatus,
        current_user_id: int,
        payment_method: Optional[PaymentMethod] = None,
        payment_date: Optional[date] = None,
        payment_reference: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> PayrollRecord:
        """Move a record through PENDING -> VALIDATED -> PAID"""
        record = await self.get_payroll_record(record_id)

        changes = self.state_machine.plan(
            record.status,
            target_status,
            payment_method=payment_method,
            payment_date=payment_date,
            payment_reference=payment_reference,
            acting_user_id=current_user_id,
        )

        previous = record.status
        updated = await self.gateway.update(
            TABLE,
            record_id,
            changes,
            expected_version=expected_version if expected_version is not None else record.version,
            options=RECORD_OPTIONS,
        )

        log_user_action(
            current_user_id, "TRANSITION", "payroll_record", record_id,
            from_status=previous.value, to_status=updated.status.value,
        )
        logger.info(f"Payroll record {record_id} moved {previous.value} -> {updated.status.value} by user {current_user_id}")
        return updated

    async def delete_payroll_record(self, record_id: int, current_user_id: int) -> bool:
        record = await self.get_payroll_record(record_id)

        if record.status == PayrollStatus.PAID:
            if not settings.ALLOW_PAID_PAYROLL_DELETION:
                raise InvalidTransitionError(
                    record.status.value, None,
                    "Paid payroll records are retained and cannot be deleted",
                )
            logger.warning(f"Deleting PAID payroll record {record_id} (retention override enabled)")

        await self.gateway.delete(TABLE, record_id)
        log_user_action(current_user_id, "DELETE", "payroll_record", record_id, status=record.status.value)
        return True

    # endregion

    def _check_totals(self, record: PayrollRecord) -> None:
        """Log records whose stored totals drifted from their components"""
        expected = breakdown_for_record(record)
        if (record.gross_total, record.total_deductions, record.net_payable) != (
            expected.gross_total, expected.total_deductions, expected.net_payable
        ):
            logger.error(
                f"Payroll record {record.id} stored totals drifted from components: "
                f"stored net={record.net_payable}, recomputed net={expected.net_payable}"
            )

    def _checked(self, records: List[PayrollRecord]) -> List[PayrollRecord]:
        for record in records:
            self._check_totals(record)
        return records
