from types import SimpleNamespace

from app.models.shared.enums import LeaveStatus, PayrollStatus
from app.services.dashboard.aggregation import (
    count_by_status, filter_by_free_text, filter_by_status, sum_net_payable_by_status,
)

def make_record(status, base_salary, income_tax=0, code="EMP001", last_name="Diop", net_payable=None):
    record = SimpleNamespace(
        status=status,
        base_salary=base_salary, over_salary=0, displacement_allowance=0, transport_allowance=0,
        income_tax=income_tax, pension_contribution=0, minimum_tax_levy=0,
        employee=SimpleNamespace(employee_code=code, first_name="Awa", last_name=last_name),
    )
    record.net_payable = base_salary - income_tax if net_payable is None else net_payable
    return record

RECORDS = [
    make_record(PayrollStatus.PENDING, 300000, 20000, code="EMP001", last_name="Diop"),
    make_record(PayrollStatus.PAID, 250000, 10000, code="EMP002", last_name="Ndiaye"),
    make_record(PayrollStatus.PAID, 150000, 0, code="EMP003", last_name="Sarr"),
]

class TestSumNetPayableByStatus:
    def test_groups_by_status(self):
        totals = sum_net_payable_by_status(RECORDS)
        assert totals[PayrollStatus.PENDING] == 280000
        assert totals[PayrollStatus.PAID] == 390000

    def test_every_status_present(self):
        totals = sum_net_payable_by_status(RECORDS)
        assert totals[PayrollStatus.VALIDATED] == 0
        assert set(totals) == set(PayrollStatus)

    def test_empty_input_is_all_zero(self):
        assert sum_net_payable_by_status([]) == {status: 0 for status in PayrollStatus}

    def test_uses_recomputed_net(self):
        drifted = make_record(PayrollStatus.VALIDATED, 100000, 5000, net_payable=1)
        assert sum_net_payable_by_status([drifted])[PayrollStatus.VALIDATED] == 95000

class TestCountAndFilter:
    def test_count_by_status(self):
        counts = count_by_status(RECORDS)
        assert counts == {PayrollStatus.PENDING: 1, PayrollStatus.PAID: 2}

    def test_count_with_zero_filled_statuses(self):
        counts = count_by_status(RECORDS, statuses=list(PayrollStatus))
        assert counts[PayrollStatus.VALIDATED] == 0

    def test_count_works_for_leave_statuses(self):
        requests = [SimpleNamespace(status=LeaveStatus.PENDING), SimpleNamespace(status=LeaveStatus.APPROVED)]
        assert count_by_status(requests, statuses=list(LeaveStatus))[LeaveStatus.REJECTED] == 0

    def test_filter_by_status(self):
        paid = filter_by_status(RECORDS, PayrollStatus.PAID)
        assert [r.employee.employee_code for r in paid] == ["EMP002", "EMP003"]

class TestFreeText:
    FIELDS = ("employee.employee_code", "employee.last_name")

    def test_case_insensitive_substring(self):
        matches = filter_by_free_text(RECORDS, "ndia", self.FIELDS)
        assert [r.employee.employee_code for r in matches] == ["EMP002"]

    def test_matches_code(self):
        assert len(filter_by_free_text(RECORDS, "emp00", self.FIELDS)) == 3

    def test_blank_query_returns_everything(self):
        assert filter_by_free_text(RECORDS, "   ", self.FIELDS) == RECORDS
        assert filter_by_free_text(RECORDS, None, self.FIELDS) == RECORDS

    def test_missing_relation_is_skipped(self):
        orphan = make_record(PayrollStatus.PENDING, 1000)
        orphan.employee = None
        assert filter_by_free_text([orphan], "diop", self.FIELDS) == []

    def test_enum_values_are_searchable(self):
        assert len(filter_by_free_text(RECORDS, "paid", ("status",))) == 2

    def test_no_match(self):
        assert filter_by_free_text(RECORDS, "zzz", self.FIELDS) == []
