import logging
import pytest
from datetime import date
from sqlalchemy import update

from app.core.config import settings
from app.core.exceptions import (
    ConcurrentModificationError, InvalidAmountError, InvalidTransitionError,
    MissingRequiredFieldError, NegativeNetPayableError, NotFoundError, ValidationError,
)
from app.models.hr.payroll_record import PayrollRecord
from app.models.shared.enums import PaymentMethod, PayrollStatus
from app.schemas.hr.payroll_schema import (
    PayrollPeriod, PayrollRecordCreate, PayrollRecordResponse, PayrollRecordUpdate, PayrollRunEntry,
)
from app.services.hr.payroll_service import PayrollService

def may_payroll(employee_id, period="2024-05", **overrides):
    gross = {"base_salary": 350000, "over_salary": 50000, "displacement_allowance": 25000, "transport_allowance": 0}
    deductions = {"income_tax": 37255, "pension_contribution": 24836, "minimum_tax_levy": 3000}
    for key, value in overrides.items():
        (gross if key in gross else deductions)[key] = value
    return PayrollRecordCreate(employee_id=employee_id, period=period, gross=gross, deductions=deductions)

@pytest.mark.asyncio
class TestCreateAndRead:
    async def test_create_computes_totals(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        assert record.status == PayrollStatus.PENDING
        assert record.gross_total == 425000
        assert record.total_deductions == 65091
        assert record.net_payable == 359909
        assert record.version == 1
        assert record.created_by == people.admin.id
        assert record.employee.employee_code == "EMP001"

    async def test_one_record_per_employee_and_period(self, session, people):
        service = PayrollService(session)
        await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        with pytest.raises(ValidationError):
            await service.create_payroll_record(may_payroll(people.employee.id, period="Mai 2024"), people.admin.id)

        other = await service.create_payroll_record(may_payroll(people.employee.id, period="2024-06"), people.admin.id)
        assert other.period_month == 6

    async def test_unknown_employee(self, session, people):
        with pytest.raises(NotFoundError):
            await PayrollService(session).create_payroll_record(may_payroll(9999), people.admin.id)

    async def test_negative_component(self, session, people):
        with pytest.raises(InvalidAmountError):
            await PayrollService(session).create_payroll_record(
                may_payroll(people.employee.id, over_salary=-1), people.admin.id
            )

    async def test_deductions_above_gross(self, session, people):
        with pytest.raises(NegativeNetPayableError):
            await PayrollService(session).create_payroll_record(
                may_payroll(people.employee.id, income_tax=900000), people.admin.id
            )
        assert await PayrollService(session).list_by_employee(people.employee.id) == []

    async def test_lists(self, session, people):
        service = PayrollService(session)
        await service.create_payroll_record(may_payroll(people.employee.id, period="2024-04"), people.admin.id)
        await service.create_payroll_record(may_payroll(people.employee.id, period="2024-05"), people.admin.id)
        await service.create_payroll_record(may_payroll(people.second_employee.id, period="2024-05"), people.admin.id)

        history = await service.list_by_employee(people.employee.id)
        assert [r.period_month for r in history] == [5, 4]

        may = await service.list_by_period(2024, 5)
        assert {r.employee_id for r in may} == {people.employee.id, people.second_employee.id}

        found = await service.list_payroll_records(search="ndiaye")
        assert [r.employee_id for r in found] == [people.second_employee.id]

        pending = await service.list_payroll_records(status=PayrollStatus.PENDING)
        assert len(pending) == 3
        assert await service.list_payroll_records(status=PayrollStatus.PAID) == []

    async def test_detail_includes_profile(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        detail = await service.get_payroll_record_detail(record.id)
        assert detail["record"].id == record.id
        assert detail["profile"].contract_status == "CDI"
        assert detail["profile"].tax_parts == 2

    async def test_drift_is_logged_and_recomputed(self, session, people, caplog):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await session.execute(update(PayrollRecord).where(PayrollRecord.id == record.id).values(net_payable=1))
        await session.commit()

        with caplog.at_level(logging.ERROR, logger="app.services.hr.payroll_service"):
            stored = await service.get_payroll_record(record.id)

        assert stored.net_payable == 1
        assert any("drifted" in message for message in caplog.messages)
        assert PayrollRecordResponse.model_validate(stored).net_payable == 359909

@pytest.mark.asyncio
class TestUpdateAndDelete:
    async def test_update_pending_recomputes_totals(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        updated = await service.update_payroll_record(
            record.id, PayrollRecordUpdate(transport_allowance=20000), people.hr_manager.id
        )
        assert updated.gross_total == 445000
        assert updated.net_payable == 379909
        assert updated.version == 2
        assert updated.updated_by == people.hr_manager.id

    async def test_update_period(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        updated = await service.update_payroll_record(record.id, PayrollRecordUpdate(period="06/2024"), people.admin.id)
        assert (updated.period_year, updated.period_month) == (2024, 6)

    async def test_validated_record_cannot_be_edited(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.transition_payroll_status(record.id, PayrollStatus.VALIDATED, people.admin.id)

        with pytest.raises(InvalidTransitionError):
            await service.update_payroll_record(record.id, PayrollRecordUpdate(base_salary=1), people.admin.id)

    async def test_update_with_stale_version(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.update_payroll_record(record.id, PayrollRecordUpdate(over_salary=0), people.admin.id)

        with pytest.raises(ConcurrentModificationError):
            await service.update_payroll_record(
                record.id, PayrollRecordUpdate(over_salary=10000, expected_version=1), people.admin.id
            )

    async def test_empty_update_still_checks_version(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.update_payroll_record(record.id, PayrollRecordUpdate(over_salary=0), people.admin.id)

        with pytest.raises(ConcurrentModificationError):
            await service.update_payroll_record(record.id, PayrollRecordUpdate(expected_version=1), people.admin.id)

        current = await service.update_payroll_record(record.id, PayrollRecordUpdate(expected_version=2), people.admin.id)
        assert current.version == 2

    async def test_delete_pending(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        assert await service.delete_payroll_record(record.id, people.admin.id) is True
        with pytest.raises(NotFoundError):
            await service.get_payroll_record(record.id)

    async def test_paid_record_is_retained(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.transition_payroll_status(
            record.id, PayrollStatus.PAID, people.admin.id, payment_method=PaymentMethod.CASH
        )

        with pytest.raises(InvalidTransitionError):
            await service.delete_payroll_record(record.id, people.admin.id)

    async def test_paid_deletion_when_enabled(self, session, people, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_PAID_PAYROLL_DELETION", True)
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.transition_payroll_status(
            record.id, PayrollStatus.PAID, people.admin.id, payment_method=PaymentMethod.CASH
        )

        assert await service.delete_payroll_record(record.id, people.admin.id) is True

@pytest.mark.asyncio
class TestTransitions:
    async def test_full_lifecycle(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        validated = await service.transition_payroll_status(record.id, PayrollStatus.VALIDATED, people.hr_manager.id)
        assert validated.status == PayrollStatus.VALIDATED
        assert validated.validated_by == people.hr_manager.id
        assert validated.version == 2

        paid = await service.transition_payroll_status(
            record.id, PayrollStatus.PAID, people.admin.id,
            payment_method=PaymentMethod("Virement"), payment_date=date(2024, 5, 31),
        )
        assert paid.status == PayrollStatus.PAID
        assert paid.payment_method == PaymentMethod.BANK_TRANSFER
        assert paid.payment_date == date(2024, 5, 31)
        assert paid.paid_by == people.admin.id
        assert paid.net_payable == 359909
        assert paid.version == 3

    async def test_paid_without_method(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        with pytest.raises(MissingRequiredFieldError):
            await service.transition_payroll_status(record.id, PayrollStatus.PAID, people.admin.id)

        unchanged = await service.get_payroll_record(record.id)
        assert unchanged.status == PayrollStatus.PENDING
        assert unchanged.version == 1

    async def test_no_way_back_from_paid(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.transition_payroll_status(record.id, PayrollStatus.PAID, people.admin.id, payment_method=PaymentMethod.CASH)

        for target in (PayrollStatus.PENDING, PayrollStatus.VALIDATED):
            with pytest.raises(InvalidTransitionError):
                await service.transition_payroll_status(record.id, target, people.admin.id)

    async def test_stale_expected_version(self, session, people):
        service = PayrollService(session)
        record = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)
        await service.transition_payroll_status(record.id, PayrollStatus.VALIDATED, people.admin.id)

        with pytest.raises(ConcurrentModificationError):
            await service.transition_payroll_status(
                record.id, PayrollStatus.PAID, people.hr_manager.id,
                payment_method=PaymentMethod.CASH, expected_version=1,
            )

    async def test_missing_record(self, session, people):
        with pytest.raises(NotFoundError):
            await PayrollService(session).transition_payroll_status(404, PayrollStatus.VALIDATED, people.admin.id)

@pytest.mark.asyncio
class TestPayrollRun:
    MAY = PayrollPeriod(year=2024, month=5)

    async def test_one_pending_record_per_active_employee(self, session, people):
        entry = PayrollRunEntry(
            employee_id=people.employee.id,
            gross={"base_salary": 350000, "over_salary": 50000, "displacement_allowance": 25000},
            deductions={"income_tax": 37255, "pension_contribution": 24836, "minimum_tax_levy": 3000},
        )
        result = await PayrollService(session).create_payroll_run(self.MAY, [entry], people.admin.id)

        created = {record.employee_id: record for record in result["created"]}
        assert set(created) == {people.employee.id, people.second_employee.id}
        assert all(record.status == PayrollStatus.PENDING for record in created.values())
        assert created[people.employee.id].net_payable == 359909
        assert created[people.second_employee.id].net_payable == 0
        assert result["skipped_employee_ids"] == []
        assert result["failed"] == []
        assert result["total_gross"] == 425000
        assert result["total_net_payable"] == 359909

    async def test_existing_records_are_skipped(self, session, people):
        service = PayrollService(session)
        existing = await service.create_payroll_record(may_payroll(people.employee.id), people.admin.id)

        first = await service.create_payroll_run(self.MAY, [], people.admin.id)
        assert first["skipped_employee_ids"] == [people.employee.id]
        assert [record.employee_id for record in first["created"]] == [people.second_employee.id]

        again = await service.create_payroll_run(self.MAY, [], people.admin.id)
        assert again["created"] == []
        assert sorted(again["skipped_employee_ids"]) == sorted([people.employee.id, people.second_employee.id])

        may = await service.list_by_period(2024, 5)
        assert len(may) == 2
        assert (await service.get_payroll_record(existing.id)).net_payable == 359909

    async def test_rejected_amounts_do_not_stop_the_run(self, session, people):
        service = PayrollService(session)
        entry = PayrollRunEntry(employee_id=people.employee.id, deductions={"income_tax": 10000})

        result = await service.create_payroll_run(self.MAY, [entry], people.admin.id)

        assert [failure["employee_id"] for failure in result["failed"]] == [people.employee.id]
        assert [record.employee_id for record in result["created"]] == [people.second_employee.id]
        assert await service.list_by_employee(people.employee.id) == []

    async def test_entry_for_inactive_employee_is_reported(self, session, people):
        people.second_employee.is_active = False
        await session.commit()
        entry = PayrollRunEntry(employee_id=people.second_employee.id, gross={"base_salary": 100000})

        result = await PayrollService(session).create_payroll_run(self.MAY, [entry], people.admin.id)

        assert result["failed"] == [{"employee_id": people.second_employee.id, "error": "Employee not found or inactive"}]
        assert [record.employee_id for record in result["created"]] == [people.employee.id]
